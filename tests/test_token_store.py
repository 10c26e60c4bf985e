from __future__ import annotations

import json
from pathlib import Path

import pytest

from deviceflow.clients.token_cipher import TokenCipherService
from deviceflow.clients.token_store import TokenStore
from deviceflow.core.errors import TokenDecodeError, TokenStoreIOError
from deviceflow.models.credentials import CredentialRecord


def _record(**overrides) -> CredentialRecord:
    values = {
        "access_token": "access-token",
        "refresh_token": "refresh-token",
        "expires_at": 1_700_014_400,
        "username": "alice",
    }
    values.update(overrides)
    return CredentialRecord(**values)


def test_save_then_load_returns_equal_record(tmp_path: Path) -> None:
    store = TokenStore(tmp_path / "tokens.json")
    record = _record()

    store.save(record)

    assert store.load() == record


def test_load_missing_file_returns_none(tmp_path: Path) -> None:
    store = TokenStore(tmp_path / "nothing-here" / "tokens.json")

    assert store.load() is None


def test_save_creates_parent_directories_and_pretty_prints(tmp_path: Path) -> None:
    path = tmp_path / "config" / "streamer" / "tokens.json"
    store = TokenStore(path)

    store.save(_record())

    raw = path.read_text(encoding="utf-8")
    assert "\n  " in raw
    assert json.loads(raw) == {
        "access_token": "access-token",
        "refresh_token": "refresh-token",
        "expires_at": 1_700_014_400,
        "username": "alice",
    }
    assert not path.with_name("tokens.json.tmp").exists()


def test_save_replaces_previous_record(tmp_path: Path) -> None:
    store = TokenStore(tmp_path / "tokens.json")
    store.save(_record())

    replacement = _record(access_token="newer", refresh_token="newer-refresh", username="bob")
    store.save(replacement)

    assert store.load() == replacement


def test_corrupt_json_is_a_decode_error(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(TokenDecodeError):
        TokenStore(path).load()


def test_non_utf8_bytes_are_a_decode_error(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    path.write_bytes(b"\xff\xfe\x00garbage")

    with pytest.raises(TokenDecodeError):
        TokenStore(path).load()


def test_missing_fields_is_a_decode_error(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    path.write_text(json.dumps({"access_token": "only-this"}), encoding="utf-8")

    with pytest.raises(TokenDecodeError):
        TokenStore(path).load()


def test_unreadable_path_is_an_io_error(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    path.mkdir()

    with pytest.raises(TokenStoreIOError):
        TokenStore(path).load()


def test_clear_is_idempotent(tmp_path: Path) -> None:
    store = TokenStore(tmp_path / "tokens.json")
    store.save(_record())

    store.clear()
    store.clear()

    assert store.load() is None


def test_encrypted_store_roundtrip_hides_tokens(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    store = TokenStore(path, cipher=TokenCipherService(secret="at-rest-secret"))
    record = _record()

    store.save(record)

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["access_token"] != "access-token"
    assert raw["refresh_token"] != "refresh-token"
    assert raw["username"] == "alice"
    assert store.load() == record


def test_encrypted_store_rejects_other_secret(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    TokenStore(path, cipher=TokenCipherService(secret="first")).save(_record())

    with pytest.raises(TokenDecodeError):
        TokenStore(path, cipher=TokenCipherService(secret="second")).load()


def test_token_cipher_roundtrip() -> None:
    cipher = TokenCipherService(secret="super-secret-key")

    sealed = cipher.seal("sensitive-token")

    assert sealed != "sensitive-token"
    assert cipher.open(sealed) == "sensitive-token"


def test_token_cipher_requires_secret() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")


def test_record_expiry_window() -> None:
    record = _record(expires_at=1_000)

    assert record.expires_within(300, now=700)
    assert record.expires_within(300, now=1_200)
    assert not record.expires_within(300, now=699)
