"""Tests for the administration CLI."""

import asyncio
from datetime import date

import pytest
from sqlalchemy import StaticPool, inspect
from sqlmodel import create_engine
from typer.testing import CliRunner

from src.profile_sync import cli
from src.profile_sync.cli import profile_commands
from src.profile_sync.core.models.registration import RegistrationFields
from src.profile_sync.core.services.database.db_session import DbSessionService
from src.profile_sync.core.storage import PendingRegistrationCache
from src.profile_sync.entities.profile import ProfileFields

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda: None)


@pytest.fixture
def cli_db(monkeypatch, db_service: DbSessionService) -> DbSessionService:
    monkeypatch.setattr(profile_commands, "DbSessionService", lambda: db_service)
    return db_service


@pytest.fixture
def cli_storage(monkeypatch, kv_storage):
    async def _storage():
        return kv_storage

    monkeypatch.setattr(profile_commands, "get_kv_storage", _storage)
    return kv_storage


class TestInitDb:
    def test_creates_profiles_table(self, monkeypatch):
        engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        service = DbSessionService(engine=engine)
        monkeypatch.setattr(
            profile_commands, "init_db", lambda: service.create_all()
        )

        result = runner.invoke(cli.app, ["init-db"])

        assert result.exit_code == 0
        assert "profiles" in inspect(engine).get_table_names()

    def test_failure_exits_non_zero(self, monkeypatch):
        def _fail():
            raise RuntimeError("database unreachable")

        monkeypatch.setattr(profile_commands, "init_db", _fail)

        result = runner.invoke(cli.app, ["init-db"])

        assert result.exit_code == 1
        assert "database unreachable" in result.output


class TestProfileShow:
    def test_shows_stored_profile(self, cli_db, profile_store):
        asyncio.run(
            profile_store.create_or_update(
                "u1",
                ProfileFields(email="a@x.com", nome="Ana", data_nascimento=date(1990, 5, 1)),
            )
        )

        result = runner.invoke(cli.app, ["profile", "show", "u1"])

        assert result.exit_code == 0
        assert "a@x.com" in result.output
        assert "Ana" in result.output
        assert "1990-05-01" in result.output

    def test_unknown_profile(self, cli_db):
        result = runner.invoke(cli.app, ["profile", "show", "missing"])

        assert result.exit_code == 1
        assert "No profile found" in result.output


class TestPending:
    def test_show_and_clear(self, cli_storage, reporter):
        cache = PendingRegistrationCache(cli_storage, reporter)
        asyncio.run(cache.save("a@x.com", RegistrationFields(nome="Ana")))

        shown = runner.invoke(cli.app, ["pending", "show", "A@x.com"])
        assert shown.exit_code == 0
        assert "Ana" in shown.output

        cleared = runner.invoke(cli.app, ["pending", "clear", "a@x.com"])
        assert cleared.exit_code == 0
        assert asyncio.run(cache.read("a@x.com")) is None

    def test_show_missing(self, cli_storage):
        result = runner.invoke(cli.app, ["pending", "show", "nobody@x.com"])

        assert result.exit_code == 1
        assert "No pending registration" in result.output

