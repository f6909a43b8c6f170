"""Unit tests for profile reconciliation."""

import asyncio
from datetime import date
from unittest.mock import AsyncMock

import pytest

from src.profile_sync.core.errors import StoreError, ValidationError
from src.profile_sync.core.models.identity import Identity
from src.profile_sync.core.models.registration import PendingRegistration, RegistrationFields
from src.profile_sync.core.services.profile import ProfileReconciler, ProfileStoreAdapter
from src.profile_sync.core.storage import InMemoryKeyValueStorage, PendingRegistrationCache
from src.profile_sync.entities.profile import ProfileFields


@pytest.fixture
def identity() -> Identity:
    return Identity(id="u1", email="a@x.com")


class TestReconcileWithHint:
    """Direct post-signup path."""

    @pytest.mark.asyncio
    async def test_writes_hint_fields(self, reconciler: ProfileReconciler, identity: Identity):
        profile = await reconciler.reconcile(
            identity, RegistrationFields(nome="Ana", data_nascimento=date(1990, 5, 1))
        )

        assert profile.id == "u1"
        assert profile.email == "a@x.com"
        assert profile.nome == "Ana"
        assert profile.data_nascimento == date(1990, 5, 1)
        assert profile.role == "user"

    @pytest.mark.asyncio
    async def test_does_not_consult_cache(
        self,
        reconciler: ProfileReconciler,
        pending_cache: PendingRegistrationCache,
        identity: Identity,
    ):
        """Should ignore and keep any cached entry when a hint is supplied."""
        await pending_cache.save("a@x.com", RegistrationFields(nome="Cached"))

        profile = await reconciler.reconcile(identity, RegistrationFields(nome="Direct"))

        assert profile.nome == "Direct"
        assert await pending_cache.read("a@x.com") is not None

    @pytest.mark.asyncio
    async def test_hint_sets_fields_explicitly(
        self, reconciler: ProfileReconciler, profile_store: ProfileStoreAdapter, identity: Identity
    ):
        """Should write hint fields even when they are empty."""
        await profile_store.create_or_update("u1", ProfileFields(email="a@x.com", nome="Old"))

        profile = await reconciler.reconcile(identity, RegistrationFields())

        assert profile.nome is None


class TestReconcileFromCache:
    """Event-listener path."""

    @pytest.mark.asyncio
    async def test_merges_and_consumes_pending(
        self,
        reconciler: ProfileReconciler,
        pending_cache: PendingRegistrationCache,
        identity: Identity,
    ):
        await pending_cache.save(
            "A@X.com", RegistrationFields(nome="Ana", data_nascimento=date(1990, 5, 1))
        )

        profile = await reconciler.reconcile(identity)

        assert profile.nome == "Ana"
        assert profile.data_nascimento == date(1990, 5, 1)
        assert await pending_cache.read("a@x.com") is None

    @pytest.mark.asyncio
    async def test_pending_for_other_email_is_untouched(
        self,
        reconciler: ProfileReconciler,
        pending_cache: PendingRegistrationCache,
    ):
        await pending_cache.save("a@x.com", RegistrationFields(nome="Ana"))

        profile = await reconciler.reconcile(Identity(id="u1", email="b@x.com"))

        assert profile.nome is None
        assert profile.email == "b@x.com"
        assert await pending_cache.read("a@x.com") is not None

    @pytest.mark.asyncio
    async def test_mismatched_entry_is_ignored(
        self,
        reconciler: ProfileReconciler,
        kv_storage: InMemoryKeyValueStorage,
        pending_cache: PendingRegistrationCache,
        identity: Identity,
    ):
        """Should not merge an entry whose stored email differs from the identity's."""
        stale = PendingRegistration(email="someone-else@x.com", nome="Stale")
        await kv_storage.set("pending_registration:a@x.com", stale, 60)

        profile = await reconciler.reconcile(identity)

        assert profile.nome is None
        assert await kv_storage.exists("pending_registration:a@x.com")

    @pytest.mark.asyncio
    async def test_minimal_path_preserves_stored_fields(
        self,
        reconciler: ProfileReconciler,
        profile_store: ProfileStoreAdapter,
        identity: Identity,
    ):
        """Should not regress populated optional fields when nothing is pending."""
        await profile_store.create_or_update(
            "u1", ProfileFields(email="a@x.com", nome="Ana", data_nascimento=date(1990, 5, 1))
        )

        profile = await reconciler.reconcile(Identity(id="u1", email="A.New@x.com"))

        assert profile.email == "a.new@x.com"
        assert profile.nome == "Ana"
        assert profile.data_nascimento == date(1990, 5, 1)

    @pytest.mark.asyncio
    async def test_is_idempotent(
        self, reconciler: ProfileReconciler, profile_store: ProfileStoreAdapter, profile_rows, identity: Identity
    ):
        once = await reconciler.reconcile(identity, RegistrationFields(nome="Ana"))
        twice = await reconciler.reconcile(identity, RegistrationFields(nome="Ana"))

        assert once == twice
        assert await profile_store.read("u1") == once
        assert len(profile_rows()) == 1

    @pytest.mark.asyncio
    async def test_concurrent_reconciliations_leave_one_row(
        self, reconciler: ProfileReconciler, profile_rows, identity: Identity
    ):
        results = await asyncio.gather(
            reconciler.reconcile(identity),
            reconciler.ensure_profile(identity),
            reconciler.reconcile(identity, RegistrationFields(nome="Ana")),
        )

        assert all(profile.id == "u1" for profile in results)
        rows = profile_rows()
        assert [row.id for row in rows] == ["u1"]

    @pytest.mark.asyncio
    async def test_store_error_propagates_and_keeps_pending(
        self, pending_cache: PendingRegistrationCache, identity: Identity
    ):
        """Should leave the pending entry in place when the write fails."""
        store = AsyncMock(spec=ProfileStoreAdapter)
        store.create_or_update.side_effect = StoreError("rejected")
        reconciler = ProfileReconciler(store, pending_cache)
        await pending_cache.save("a@x.com", RegistrationFields(nome="Ana"))

        with pytest.raises(StoreError):
            await reconciler.reconcile(identity)

        assert await pending_cache.read("a@x.com") is not None


class TestEnsureProfile:
    """Read-first mode used by explicit sign-in."""

    @pytest.mark.asyncio
    async def test_existing_profile_returned_untouched(
        self, profile_store: ProfileStoreAdapter, pending_cache: PendingRegistrationCache, identity: Identity
    ):
        await profile_store.create_or_update("u1", ProfileFields(email="a@x.com", nome="Marker"))
        store = AsyncMock(wraps=profile_store)
        reconciler = ProfileReconciler(store, pending_cache)

        profile = await reconciler.ensure_profile(Identity(id="u1", email="changed@x.com"))

        assert profile.nome == "Marker"
        assert profile.email == "a@x.com"
        store.create_or_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_minimal_profile_when_absent(
        self, reconciler: ProfileReconciler, identity: Identity
    ):
        profile = await reconciler.ensure_profile(identity)

        assert profile.id == "u1"
        assert profile.email == "a@x.com"
        assert profile.nome is None
        assert profile.role == "user"

    @pytest.mark.asyncio
    async def test_consumes_pending_when_absent(
        self,
        reconciler: ProfileReconciler,
        pending_cache: PendingRegistrationCache,
        identity: Identity,
    ):
        await pending_cache.save("a@x.com", RegistrationFields(nome="Ana"))

        profile = await reconciler.ensure_profile(identity)

        assert profile.nome == "Ana"
        assert await pending_cache.read("a@x.com") is None


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "identity",
        [Identity(id="", email="a@x.com"), Identity(id="u1", email="")],
    )
    async def test_incomplete_identity_is_rejected(
        self, reconciler: ProfileReconciler, profile_rows, identity: Identity
    ):
        with pytest.raises(ValidationError):
            await reconciler.reconcile(identity)

        assert profile_rows() == []
