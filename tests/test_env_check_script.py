"""Tests for the environment drift detection script."""

from __future__ import annotations

from pathlib import Path

import pytest

from scripts import check_env

ENV_KEYS = [
    "GITHUB_CLIENT_ID",
    "GITHUB_CLIENT_SECRET",
    "GITHUB_REDIRECT_URI",
    "SESSION_STORE_BACKEND",
    "SESSION_COOKIE_SECURE",
    "SESSION_COOKIE_SAMESITE",
    "DYNAMODB_TABLE_NAME",
    "APP_ENV",
]

VALID_ENV = {
    "GITHUB_CLIENT_ID": "abc",
    "GITHUB_CLIENT_SECRET": "secret",
    "GITHUB_REDIRECT_URI": "https://example.com/auth/github/login",
    "SESSION_STORE_BACKEND": "memory",
}


def _write_env(env_path: Path, **values: str) -> None:
    contents = "\n".join(f"{key}={value}" for key, value in values.items())
    env_path.write_text(contents + "\n", encoding="utf-8")


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _run(command: str, env_file: Path, hash_file: Path | None = None) -> int:
    argv = [command, "--env-file", str(env_file)]
    if hash_file is not None:
        argv.extend(["--hash-file", str(hash_file)])
    return check_env.main(argv)


@pytest.mark.parametrize("command", ["record", "verify", "check"])
def test_main_requires_existing_env_file(tmp_path: Path, command: str) -> None:
    env_file = tmp_path / ".missing-env"
    hash_file = tmp_path / ".env.sha256" if command != "check" else None

    assert _run(command, env_file, hash_file) == check_env.EXIT_RUNTIME_ERROR


def test_check_accepts_valid_settings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    env_file = tmp_path / ".env"
    _clear_env(monkeypatch)
    _write_env(env_file, **VALID_ENV)

    assert _run("check", env_file) == check_env.EXIT_OK
    assert "Settings OK" in capsys.readouterr().out


def test_record_and_verify_detects_mismatched_checksum(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    hash_file = tmp_path / ".env.sha256"

    _clear_env(monkeypatch)
    _write_env(env_file, **VALID_ENV)

    assert _run("record", env_file, hash_file) == check_env.EXIT_OK
    assert hash_file.read_text(encoding="utf-8").strip()

    _clear_env(monkeypatch)
    assert _run("verify", env_file, hash_file) == check_env.EXIT_OK

    _write_env(env_file, **{**VALID_ENV, "GITHUB_CLIENT_SECRET": "rotated"})

    _clear_env(monkeypatch)
    assert _run("verify", env_file, hash_file) == check_env.EXIT_CHECKSUM_ERROR


def test_verify_without_baseline_is_runtime_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    _clear_env(monkeypatch)
    _write_env(env_file, **VALID_ENV)

    assert _run("verify", env_file, tmp_path / "absent.sha256") == check_env.EXIT_RUNTIME_ERROR


def test_validation_failure_for_missing_required_values(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    hash_file = tmp_path / ".env.sha256"

    _clear_env(monkeypatch)
    _write_env(
        env_file,
        GITHUB_CLIENT_ID="abc",
        GITHUB_REDIRECT_URI="https://example.com/auth/github/login",
    )

    assert _run("record", env_file, hash_file) == check_env.EXIT_VALIDATION_ERROR
    assert not hash_file.exists()


@pytest.mark.parametrize(
    "overrides",
    [
        {"SESSION_COOKIE_SAMESITE": "none", "SESSION_COOKIE_SECURE": "false"},
        {"SESSION_STORE_BACKEND": "dynamodb"},
        {"APP_ENV": "production"},
    ],
)
def test_inconsistent_settings_fail_validation(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, overrides: dict[str, str]
) -> None:
    env_file = tmp_path / ".env"
    _clear_env(monkeypatch)
    _write_env(env_file, **{**VALID_ENV, **overrides})

    assert _run("check", env_file) == check_env.EXIT_VALIDATION_ERROR
