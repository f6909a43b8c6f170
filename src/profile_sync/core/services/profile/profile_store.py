from datetime import datetime

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from src.profile_sync.core.errors import StoreError, ValidationError
from src.profile_sync.core.models.registration import normalize_email
from src.profile_sync.core.reporting import ErrorReporter, LoguruErrorReporter
from src.profile_sync.core.services.database.db_session import DbSessionService
from src.profile_sync.entities.profile import Profile, ProfileFields, ProfileRepository
from src.profile_sync.runtime.context import get_config


class ProfileStoreAdapter:
    """Create-or-update and read operations against the profiles table.

    Store failures surface as ``StoreError``; ``update_last_active`` is the
    only operation whose failures are reported instead of raised.
    """

    def __init__(
        self,
        db_service: DbSessionService,
        reporter: ErrorReporter | None = None,
    ) -> None:
        self._db = db_service
        self._reporter = reporter or LoguruErrorReporter()

    async def create_or_update(self, profile_id: str, fields: ProfileFields) -> Profile:
        """Atomically insert the profile or update the explicitly set fields.

        Args:
            profile_id: Identity id the profile belongs to
            fields: Columns to write; unset fields keep their stored value

        Returns:
            The stored row, server-assigned defaults included

        Raises:
            ValidationError: If ``profile_id`` is empty
            StoreError: If the store rejects the write
        """
        if not profile_id:
            raise ValidationError("Profile id is required to create or update a profile")

        values = fields.changes()
        if "email" in values:
            values["email"] = normalize_email(values["email"])

        try:
            with self._db.session_scope() as session:
                profile = ProfileRepository(session).upsert(
                    profile_id, values, get_config().profiles.default_role
                )
        except (SQLAlchemyError, LookupError) as e:
            raise StoreError(f"Failed to create or update profile {profile_id}", cause=e) from e

        logger.debug("Profile {} upserted with fields {}", profile_id, sorted(values))
        return profile

    async def read(self, profile_id: str) -> Profile | None:
        """Return the profile for ``profile_id`` or None when there is none."""
        if not profile_id:
            return None

        try:
            with self._db.session_scope() as session:
                return ProfileRepository(session).get(profile_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read profile {profile_id}", cause=e) from e

    async def update_last_active(self, profile_id: str, timestamp: datetime) -> None:
        try:
            with self._db.session_scope() as session:
                updated = ProfileRepository(session).update_fields(
                    profile_id, {"last_active": timestamp}
                )
            if not updated:
                logger.debug("No profile {} to mark active", profile_id)
        except Exception as e:
            self._reporter.report(e, operation="profile.update_last_active", profile_id=profile_id)
