"""Profile database table model."""

from datetime import UTC, date, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


class ProfileTable(SQLModel, table=True):
    """Database persistence model for profiles.

    The primary key is the identity id itself; row-level access is expected
    to be restricted to the owning identity by the store's policy.
    """

    __tablename__ = "profiles"

    id: str = Field(primary_key=True)
    email: str = Field(sa_column=sa.Column(sa.String(320), nullable=False, index=True))
    nome: str | None = None
    data_nascimento: date | None = None
    role: str = Field(
        default="user",
        sa_column=sa.Column(sa.String(64), nullable=False, server_default="user"),
    )
    last_active: datetime | None = Field(
        default=None, sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=sa.Column(
            sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
