"""Tests for the device flow login CLI."""

from __future__ import annotations

from pathlib import Path

import pytest

from deviceflow.clients.token_store import TokenStore
from deviceflow.core.config import AppSettings, StorageSettings
from deviceflow.core.errors import ProviderError
from deviceflow.dependencies import AuthContext
from deviceflow.models.credentials import CredentialRecord
from deviceflow.services import AuthCommands, AuthenticatedApiClient, CredentialManager
from deviceflow import cli as auth_cli

try:
    from ._fakes import PENDING, FakeClock, FakeOAuthClient, token_pair
except Exception:  # pragma: no cover - fallback for direct execution
    from _fakes import PENDING, FakeClock, FakeOAuthClient, token_pair  # type: ignore


def _context(tmp_path: Path, oauth: FakeOAuthClient, clock: FakeClock) -> AuthContext:
    settings = AppSettings(storage=StorageSettings(data_dir=tmp_path))
    store = TokenStore(settings.storage.tokens_path)
    manager = CredentialManager(store, oauth, clock=clock, sleep=clock.sleep)
    return AuthContext(
        settings=settings,
        store=store,
        oauth_client=oauth,
        manager=manager,
        commands=AuthCommands(manager),
        api_client=AuthenticatedApiClient(manager, settings.provider),
    )


def _seed(context: AuthContext, clock: FakeClock) -> None:
    context.store.save(
        CredentialRecord(
            access_token="current",
            refresh_token="current-refresh",
            expires_at=int(clock.now) + 3600,
            username="alice",
        )
    )


def test_status_when_logged_out(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    context = _context(tmp_path, FakeOAuthClient(), FakeClock())

    exit_code = auth_cli.main(["status"], context=context)

    assert exit_code == auth_cli.EXIT_NOT_AUTHENTICATED
    assert "Not logged in" in capsys.readouterr().out


def test_login_prints_code_and_user(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    oauth = FakeOAuthClient(poll_results=[PENDING, PENDING, token_pair()])
    context = _context(tmp_path, oauth, FakeClock())

    exit_code = auth_cli.main(["login"], context=context)

    out = capsys.readouterr().out
    assert exit_code == auth_cli.EXIT_OK
    assert "WXYZ" in out
    assert "https://www.twitch.tv/activate" in out
    assert "Logged in as alice" in out
    assert len(oauth.poll_calls) == 3
    assert context.store.load() is not None


def test_login_failure_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    oauth = FakeOAuthClient(poll_results=[ProviderError("Device auth failed: access_denied")])
    context = _context(tmp_path, oauth, FakeClock())

    exit_code = auth_cli.main(["login"], context=context)

    assert exit_code == auth_cli.EXIT_RUNTIME_ERROR
    assert "access_denied" in capsys.readouterr().err


def test_token_prints_access_token(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    clock = FakeClock()
    context = _context(tmp_path, FakeOAuthClient(), clock)
    _seed(context, clock)

    exit_code = auth_cli.main(["token"], context=context)

    assert exit_code == auth_cli.EXIT_OK
    assert capsys.readouterr().out.strip() == "current"


def test_token_without_login(tmp_path: Path) -> None:
    context = _context(tmp_path, FakeOAuthClient(), FakeClock())

    assert auth_cli.main(["token"], context=context) == auth_cli.EXIT_NOT_AUTHENTICATED


def test_logout_then_status(tmp_path: Path) -> None:
    clock = FakeClock()
    oauth = FakeOAuthClient()
    context = _context(tmp_path, oauth, clock)
    _seed(context, clock)

    assert auth_cli.main(["status"], context=context) == auth_cli.EXIT_OK
    assert auth_cli.main(["logout"], context=context) == auth_cli.EXIT_OK
    assert auth_cli.main(["status"], context=context) == auth_cli.EXIT_NOT_AUTHENTICATED
    assert oauth.revoke_calls == ["current"]
