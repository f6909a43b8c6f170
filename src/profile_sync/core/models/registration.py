"""Registration fields captured before an identity is confirmed."""

from datetime import date

from pydantic import BaseModel, Field, field_validator


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class RegistrationFields(BaseModel):
    """Optional profile fields collected on the signup form."""

    nome: str | None = Field(default=None, description="Display name")
    data_nascimento: date | None = Field(default=None, description="Birth date")


class PendingRegistration(RegistrationFields):
    """Registration fields cached under the email they were submitted with."""

    email: str = Field(description="Email the fields were submitted with")

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return normalize_email(value)

    def matches(self, email: str | None) -> bool:
        """Case-insensitive comparison against an identity's email."""
        return bool(email) and self.email == normalize_email(email)

    def fields(self) -> RegistrationFields:
        return RegistrationFields(nome=self.nome, data_nascimento=self.data_nascimento)
