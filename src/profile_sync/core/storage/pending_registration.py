"""Cache of registration fields submitted before an identity is confirmed."""

from src.profile_sync.core.models.registration import (
    PendingRegistration,
    RegistrationFields,
    normalize_email,
)
from src.profile_sync.core.reporting import ErrorReporter, LoguruErrorReporter
from src.profile_sync.core.storage.kv_storage import KeyValueStorage
from src.profile_sync.runtime.context import get_config


class PendingRegistrationCache:
    """Pending registrations keyed by lower-cased email.

    Losing an entry only costs the user re-entering optional fields, so no
    method raises: storage failures go to the error reporter and reads
    degrade to "absent".
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        reporter: ErrorReporter | None = None,
    ) -> None:
        self._storage = storage
        self._reporter = reporter or LoguruErrorReporter()

    def _key(self, email: str) -> str:
        return f"{get_config().pending_registration.key_prefix}{normalize_email(email)}"

    async def save(self, email: str, fields: RegistrationFields) -> None:
        """Store ``fields`` for ``email``, overwriting any previous entry."""
        try:
            pending = PendingRegistration(
                email=normalize_email(email),
                nome=fields.nome,
                data_nascimento=fields.data_nascimento,
            )
            await self._storage.set(
                self._key(email),
                pending,
                get_config().pending_registration.ttl_seconds,
            )
        except Exception as e:
            self._reporter.report(e, operation="pending_registration.save", email=email)

    async def read(self, email: str) -> PendingRegistration | None:
        """Return the entry for ``email``; unreadable entries count as absent."""
        if not normalize_email(email):
            return None
        try:
            return await self._storage.get(self._key(email), PendingRegistration)
        except Exception as e:
            self._reporter.report(e, operation="pending_registration.read", email=email)
            return None

    async def clear(self, email: str) -> None:
        try:
            await self._storage.delete(self._key(email))
        except Exception as e:
            self._reporter.report(e, operation="pending_registration.clear", email=email)
