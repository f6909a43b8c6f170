"""Error taxonomy for profile reconciliation."""


class ProfileSyncError(Exception):
    """Base class for profile-sync errors."""


class ValidationError(ProfileSyncError):
    """A required identifier or email was missing on a direct call."""


class StoreError(ProfileSyncError):
    """The profile store rejected or failed an operation."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class AuthError(ProfileSyncError):
    """The identity provider rejected a request."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
