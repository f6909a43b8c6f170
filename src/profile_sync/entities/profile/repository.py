"""Profile data-access layer."""

from typing import Any

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select

from .entity import Profile
from .table import ProfileTable

# Dialects whose INSERT supports ON CONFLICT (id) DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class ProfileRepository:
    """Data-access layer for profiles."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, profile_id: str) -> Profile | None:
        statement = (
            select(ProfileTable)
            .where(ProfileTable.id == profile_id)
            .execution_options(populate_existing=True)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Profile.model_validate(row, from_attributes=True)

    def upsert(self, profile_id: str, values: dict[str, Any], default_role: str) -> Profile:
        """Insert the profile or update the given columns.

        Only the keys present in ``values`` are written when the row already
        exists; ``role`` is written on insert only. Dialects with
        ``ON CONFLICT`` get a single statement; others fall back to a
        row-locked read-then-write.

        Raises:
            LookupError: If ``values`` is empty and there is no such profile
        """
        if values:
            insert = _UPSERT_INSERTS.get(self._session.get_bind().dialect.name)
            if insert is not None:
                self._insert_on_conflict(insert, profile_id, values, default_role)
            else:
                self._locked_upsert(profile_id, values, default_role)

        profile = self.get(profile_id)
        if profile is None:
            raise LookupError(f"Profile {profile_id} does not exist")
        return profile

    def _insert_on_conflict(
        self, insert, profile_id: str, values: dict[str, Any], default_role: str
    ) -> None:
        table = ProfileTable.__table__
        statement = insert(table).values(id=profile_id, role=default_role, **values)
        statement = statement.on_conflict_do_update(
            index_elements=[table.c.id],
            set_={key: statement.excluded[key] for key in values},
        )
        self._session.connection().execute(statement)

    def _locked_upsert(self, profile_id: str, values: dict[str, Any], default_role: str) -> None:
        table = ProfileTable.__table__
        connection = self._session.connection()
        existing = connection.execute(
            sa.select(table.c.id).where(table.c.id == profile_id).with_for_update()
        ).first()
        if existing is None:
            connection.execute(
                sa.insert(table).values(id=profile_id, role=default_role, **values)
            )
        else:
            connection.execute(
                sa.update(table).where(table.c.id == profile_id).values(**values)
            )

    def update_fields(self, profile_id: str, values: dict[str, Any]) -> bool:
        """Update the given columns of an existing profile; False when absent."""
        statement = (
            sa.update(ProfileTable.__table__)
            .where(ProfileTable.__table__.c.id == profile_id)
            .values(**values)
        )
        result = self._session.connection().execute(statement)
        return result.rowcount > 0
