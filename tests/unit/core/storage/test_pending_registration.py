"""Tests for the pending-registration cache."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from src.profile_sync.core.models.registration import PendingRegistration, RegistrationFields
from src.profile_sync.core.storage import InMemoryKeyValueStorage, PendingRegistrationCache
from src.profile_sync.runtime.config.config_data import ConfigData, PendingRegistrationConfig
from src.profile_sync.runtime.context import with_context
from tests.fixtures.core import RecordingErrorReporter


class TestPendingRegistrationCache:
    @pytest.mark.asyncio
    async def test_save_and_read(self, pending_cache: PendingRegistrationCache):
        """Should return the fields saved for an email."""
        await pending_cache.save(
            "a@x.com", RegistrationFields(nome="Ana", data_nascimento=date(1990, 5, 1))
        )

        pending = await pending_cache.read("a@x.com")

        assert pending == PendingRegistration(
            email="a@x.com", nome="Ana", data_nascimento=date(1990, 5, 1)
        )

    @pytest.mark.asyncio
    async def test_keys_are_case_insensitive(self, pending_cache: PendingRegistrationCache):
        """Should store and look up entries by lower-cased email."""
        await pending_cache.save("Ana@X.com", RegistrationFields(nome="Ana"))

        pending = await pending_cache.read("ana@x.COM")

        assert pending is not None
        assert pending.email == "ana@x.com"

    @pytest.mark.asyncio
    async def test_save_overwrites(self, pending_cache: PendingRegistrationCache):
        await pending_cache.save("a@x.com", RegistrationFields(nome="Ana"))
        await pending_cache.save("a@x.com", RegistrationFields(nome="Ana Maria"))

        pending = await pending_cache.read("a@x.com")

        assert pending is not None
        assert pending.nome == "Ana Maria"

    @pytest.mark.asyncio
    async def test_read_missing(self, pending_cache: PendingRegistrationCache):
        assert await pending_cache.read("nobody@x.com") is None
        assert await pending_cache.read("") is None

    @pytest.mark.asyncio
    async def test_clear_is_idempotent(self, pending_cache: PendingRegistrationCache):
        """Should delete the entry and tolerate clearing an absent one."""
        await pending_cache.save("a@x.com", RegistrationFields(nome="Ana"))

        await pending_cache.clear("A@x.com")
        await pending_cache.clear("a@x.com")

        assert await pending_cache.read("a@x.com") is None

    @pytest.mark.asyncio
    async def test_uses_configured_prefix(self, kv_storage: InMemoryKeyValueStorage):
        """Should key entries by the configured prefix and lower-cased email."""
        cache = PendingRegistrationCache(kv_storage)
        config = ConfigData(pending_registration=PendingRegistrationConfig(key_prefix="reg:"))

        with with_context(config):
            await cache.save("A@x.com", RegistrationFields(nome="Ana"))

        assert await kv_storage.exists("reg:a@x.com")

    @pytest.mark.asyncio
    async def test_corrupted_entry_reads_as_absent(
        self,
        kv_storage: InMemoryKeyValueStorage,
        pending_cache: PendingRegistrationCache,
        reporter: RecordingErrorReporter,
    ):
        """Should treat undecodable data as a missing entry."""
        await pending_cache.save("a@x.com", RegistrationFields(nome="Ana"))
        key = next(iter(kv_storage._data))
        kv_storage._data[key]["data"] = {"nome": ["not", "a", "string"]}

        assert await pending_cache.read("a@x.com") is None
        assert reporter.operations() == ["pending_registration.read"]


class TestPendingRegistrationCacheFailures:
    """Storage failures are reported, never raised."""

    @pytest.fixture
    def failing_storage(self) -> AsyncMock:
        storage = AsyncMock()
        storage.set.side_effect = RuntimeError("Redis set failed")
        storage.get.side_effect = RuntimeError("Redis get failed")
        storage.delete.side_effect = RuntimeError("Redis delete failed")
        return storage

    @pytest.mark.asyncio
    async def test_failures_are_swallowed_and_reported(
        self, failing_storage: AsyncMock, reporter: RecordingErrorReporter
    ):
        cache = PendingRegistrationCache(failing_storage, reporter)

        await cache.save("a@x.com", RegistrationFields(nome="Ana"))
        assert await cache.read("a@x.com") is None
        await cache.clear("a@x.com")

        assert reporter.operations() == [
            "pending_registration.save",
            "pending_registration.read",
            "pending_registration.clear",
        ]
        assert reporter.reports[0].context == {"email": "a@x.com"}


class TestPendingRegistrationModel:
    def test_matches_is_case_insensitive(self):
        pending = PendingRegistration(email="A@X.com")

        assert pending.email == "a@x.com"
        assert pending.matches("a@X.COM")
        assert not pending.matches("b@x.com")
        assert not pending.matches(None)
