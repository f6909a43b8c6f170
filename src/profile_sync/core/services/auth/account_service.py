from loguru import logger

from src.profile_sync.core.errors import ValidationError
from src.profile_sync.core.models.identity import SignInResult, SignUpResult
from src.profile_sync.core.models.registration import RegistrationFields, normalize_email
from src.profile_sync.core.services.auth.identity_provider import IdentityProvider
from src.profile_sync.core.services.profile.reconciler import ProfileReconciler
from src.profile_sync.core.storage.pending_registration import PendingRegistrationCache


class AccountService:
    """User-initiated sign-up, sign-in and sign-out flows."""

    def __init__(
        self,
        provider: IdentityProvider,
        reconciler: ProfileReconciler,
        pending_cache: PendingRegistrationCache,
    ):
        self._provider = provider
        self._reconciler = reconciler
        self._pending = pending_cache

    async def sign_up(
        self,
        email: str,
        password: str,
        fields: RegistrationFields | None = None,
    ) -> SignUpResult:
        """Create the identity and, when it is usable right away, its profile.

        When the provider requires confirmation first, the registration fields
        are cached under the email and the profile store is left alone; the
        auth event listener merges them once the identity signs in.
        """
        if not normalize_email(email):
            raise ValidationError("Email is required to sign up")
        fields = fields or RegistrationFields()

        result = await self._provider.sign_up(email, password)

        if result.needs_confirmation or result.identity is None:
            await self._pending.save(email, fields)
            logger.info("Sign-up for {} needs confirmation", normalize_email(email))
            return SignUpResult(identity=result.identity, needs_confirmation=True)

        profile = await self._reconciler.reconcile(result.identity, pending_hint=fields)
        return SignUpResult(identity=result.identity, profile=profile)

    async def sign_in(self, email: str, password: str) -> SignInResult:
        """Authenticate and make sure the identity has a profile.

        Raises:
            AuthError: If the provider rejects the credentials
        """
        if not normalize_email(email):
            raise ValidationError("Email is required to sign in")

        identity = await self._provider.sign_in_with_password(email, password)
        if identity is None:
            return SignInResult(needs_action=True)

        profile = await self._reconciler.ensure_profile(identity)
        return SignInResult(identity=identity, profile=profile)

    async def sign_out(self) -> None:
        await self._provider.sign_out()
