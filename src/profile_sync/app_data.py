from dataclasses import dataclass

from src.profile_sync.core.reporting import ErrorReporter, LoguruErrorReporter
from src.profile_sync.core.services import (
    AccountService,
    AuthEventListener,
    DbSessionService,
    GoTrueIdentityProvider,
    ProfileReconciler,
    ProfileStoreAdapter,
)
from src.profile_sync.core.services.auth import IdentityProvider
from src.profile_sync.core.storage import (
    KeyValueStorage,
    PendingRegistrationCache,
    get_kv_storage,
)


@dataclass
class ApplicationDependencies:
    provider: IdentityProvider
    database_service: DbSessionService
    pending_cache: PendingRegistrationCache
    profile_store: ProfileStoreAdapter
    reconciler: ProfileReconciler
    accounts: AccountService
    listener: AuthEventListener


async def build_dependencies(
    provider: IdentityProvider | None = None,
    database_service: DbSessionService | None = None,
    storage: KeyValueStorage | None = None,
    reporter: ErrorReporter | None = None,
) -> ApplicationDependencies:
    """Wire the services together; anything not supplied is built from config.

    The listener is created but not started: the host calls
    ``deps.listener.start()`` once and ``await deps.listener.stop()`` on
    shutdown.
    """
    reporter = reporter or LoguruErrorReporter()
    provider = provider or GoTrueIdentityProvider(reporter=reporter)
    database_service = database_service or DbSessionService()
    storage = storage or await get_kv_storage()

    pending_cache = PendingRegistrationCache(storage, reporter)
    profile_store = ProfileStoreAdapter(database_service, reporter)
    reconciler = ProfileReconciler(profile_store, pending_cache)

    return ApplicationDependencies(
        provider=provider,
        database_service=database_service,
        pending_cache=pending_cache,
        profile_store=profile_store,
        reconciler=reconciler,
        accounts=AccountService(provider, reconciler, pending_cache),
        listener=AuthEventListener(provider, reconciler, profile_store, reporter),
    )
