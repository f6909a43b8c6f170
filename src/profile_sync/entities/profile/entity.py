"""Profile domain entity."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field


class Profile(BaseModel):
    """Application-specific attributes of an authenticated identity.

    ``id`` is the identity id issued by the provider; there is exactly one
    profile per identity.
    """

    id: str = Field(description="Identity id (primary key)")
    email: str = Field(description="Lower-cased email tracking the identity's email")
    nome: str | None = Field(default=None, description="Display name")
    data_nascimento: date | None = Field(default=None, description="Birth date")
    role: str = Field(default="user", description="Application role")
    last_active: datetime | None = Field(
        default=None, description="Last observed session activation"
    )

    def __eq__(self, other: Any) -> bool:
        """Compare profiles by stored attributes, ignoring activity timestamps."""
        if not isinstance(other, Profile):
            return False

        return (
            self.id == other.id
            and self.email == other.email
            and self.nome == other.nome
            and self.data_nascimento == other.data_nascimento
            and self.role == other.role
        )

    def __hash__(self) -> int:
        return hash((self.id, self.email, self.nome, self.data_nascimento, self.role))


class ProfileFields(BaseModel):
    """Writable profile columns for a create-or-update.

    Only fields that were explicitly set are written to an existing row, so
    ``ProfileFields(email=...)`` leaves ``nome`` and ``data_nascimento``
    untouched while ``ProfileFields(email=..., nome=None)`` clears ``nome``.
    """

    email: str | None = None
    nome: str | None = None
    data_nascimento: date | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
