"""Profile reconciliation: keep exactly one profile per authenticated identity."""

from loguru import logger

from src.profile_sync.core.errors import ValidationError
from src.profile_sync.core.models.identity import Identity
from src.profile_sync.core.models.registration import RegistrationFields
from src.profile_sync.core.services.profile.profile_store import ProfileStoreAdapter
from src.profile_sync.core.storage.pending_registration import PendingRegistrationCache
from src.profile_sync.entities.profile import Profile, ProfileFields


class ProfileReconciler:
    """Decides whether to create, merge or leave a profile untouched.

    Every write goes through ``ProfileStoreAdapter.create_or_update``, a single
    conflict-resolved upsert, so concurrent reconciliations of the same
    identity converge on one row without locking.
    """

    def __init__(
        self,
        store: ProfileStoreAdapter,
        pending_cache: PendingRegistrationCache,
    ) -> None:
        self._store = store
        self._pending = pending_cache

    async def reconcile(
        self,
        identity: Identity,
        pending_hint: RegistrationFields | None = None,
    ) -> Profile:
        """Bring the identity's profile up to date.

        With ``pending_hint`` (a synchronous caller such as sign-up holding the
        form fields) the hint is written as-is and the cache is not consulted.
        Without it, a cached pending registration for the identity's email is
        merged in and consumed; failing that, only the email is written.

        Args:
            identity: The authenticated identity
            pending_hint: Registration fields supplied directly by the caller

        Returns:
            The stored profile
        """
        _require_identity(identity)

        if pending_hint is not None:
            fields = ProfileFields(
                email=identity.email,
                nome=pending_hint.nome,
                data_nascimento=pending_hint.data_nascimento,
            )
            return await self._store.create_or_update(identity.id, fields)

        return await self._reconcile_from_cache(identity)

    async def ensure_profile(self, identity: Identity) -> Profile:
        """Read-first reconciliation for explicit sign-in.

        An existing profile is returned untouched; otherwise the cache-backed
        path runs, so a signed-in identity always ends up with a profile.
        """
        _require_identity(identity)

        profile = await self._store.read(identity.id)
        if profile is not None:
            return profile

        logger.info("No profile for identity {}, creating one", identity.id)
        return await self._reconcile_from_cache(identity)

    async def _reconcile_from_cache(self, identity: Identity) -> Profile:
        pending = await self._pending.read(identity.email)

        if pending is not None and pending.matches(identity.email):
            fields = ProfileFields(
                email=identity.email,
                nome=pending.nome,
                data_nascimento=pending.data_nascimento,
            )
            profile = await self._store.create_or_update(identity.id, fields)
            await self._pending.clear(identity.email)
            logger.info("Merged pending registration into profile {}", identity.id)
            return profile

        if pending is not None:
            logger.warning(
                "Ignoring pending registration for {}: email does not match identity {}",
                pending.email,
                identity.id,
            )

        return await self._store.create_or_update(
            identity.id, ProfileFields(email=identity.email)
        )


def _require_identity(identity: Identity) -> None:
    if not identity.id:
        raise ValidationError("Identity id is required for reconciliation")
    if not identity.email:
        raise ValidationError(f"Identity {identity.id} has no email")
