"""Check that a deployment's session gateway configuration is usable.

The tool performs two main checks:

1. It loads the given ``.env`` file, instantiates ``AppSettings`` and applies
   the cross-field rules pydantic cannot express on a single group (cookie
   attributes browsers will reject, a store backend without its settings).
2. It can record and verify a checksum for the ``.env`` file so that a
   rotated client secret or session TTL change is noticed before restart.

Example usages::

    python -m scripts.check_env record --env-file /opt/gateway/.env \
        --hash-file /opt/gateway/.env.sha256

    python -m scripts.check_env verify --env-file /opt/gateway/.env \
        --hash-file /opt/gateway/.env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path
from typing import Callable

from dotenv import load_dotenv
from pydantic import ValidationError

from session_gateway.core.config import AppSettings

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


class ConfigurationError(Exception):
    """Settings load, but describe a deployment that cannot work."""


def _compute_hash(env_file: Path) -> str:
    """Return the SHA256 checksum for the target environment file."""
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _check_consistency(settings: AppSettings) -> list[str]:
    problems: list[str] = []
    if settings.session.cookie_samesite == "none" and not settings.session.cookie_secure:
        problems.append(
            "SESSION_COOKIE_SAMESITE=none requires SESSION_COOKIE_SECURE=true; "
            "browsers drop the session cookie otherwise."
        )
    if settings.store.backend == "dynamodb" and not settings.store.dynamodb_table_name:
        problems.append("SESSION_STORE_BACKEND=dynamodb requires DYNAMODB_TABLE_NAME.")
    if settings.store.backend == "memory" and settings.environment == "production":
        problems.append(
            "SESSION_STORE_BACKEND=memory loses every session on restart; "
            "use sqlite or dynamodb in production."
        )
    if settings.oauth.state_ttl_seconds > settings.session.ttl_seconds:
        problems.append("OAUTH_STATE_TTL should not exceed SESSION_TTL_SECONDS.")
    return problems


def _validate_settings(env_file: Path) -> AppSettings:
    """Ensure required settings can be loaded from the supplied env file."""
    load_dotenv(env_file, override=False)
    settings = AppSettings()  # type: ignore[call-arg]
    problems = _check_consistency(settings)
    if problems:
        raise ConfigurationError("\n".join(f"  - {problem}" for problem in problems))
    return settings


def _record_checksum(env_file: Path, hash_file: Path) -> int:
    """Persist the current checksum to ``hash_file``."""
    checksum = _compute_hash(env_file)
    hash_file.write_text(f"{checksum}\n", encoding="utf-8")
    print(f"Recorded checksum to {hash_file} ({checksum})")
    return EXIT_OK


def _verify_checksum(env_file: Path, hash_file: Path) -> int:
    """Compare the current checksum to the recorded baseline."""
    if not hash_file.exists():
        print(
            f"Expected checksum file {hash_file} is missing. "
            "Re-run with the 'record' command to establish a baseline.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _compute_hash(env_file)
    if expected == actual:
        print("Environment checksum OK.")
        return EXIT_OK

    print(
        "Environment checksum mismatch!\n"
        f"  expected: {expected}\n"
        f"  actual:   {actual}\n"
        "Existing sessions may stop decrypting if TOKEN_ENCRYPTION_SECRET changed.",
        file=sys.stderr,
    )
    return EXIT_CHECKSUM_ERROR


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate session gateway settings and detect .env drift."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_env_file(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env in the repo root).",
        )

    for name, help_text in (
        ("record", "Validate settings and store the checksum baseline."),
        ("verify", "Validate settings and compare the checksum with the baseline."),
    ):
        subparser = subparsers.add_parser(name, help=help_text)
        add_env_file(subparser)
        subparser.add_argument(
            "--hash-file",
            required=True,
            type=Path,
            help="Location of the checksum baseline.",
        )

    check_parser = subparsers.add_parser(
        "check",
        help="Validate settings without touching any checksum files.",
    )
    add_env_file(check_parser)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file: Path = args.env_file
    if not env_file.exists():
        print(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    try:
        settings = _validate_settings(env_file)
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR
    except ConfigurationError as exc:
        print(f"Settings are inconsistent:\n{exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    print(
        f"Settings OK (store backend: {settings.store.backend}, "
        f"session TTL: {settings.session.ttl_seconds}s)."
    )

    command: str = args.command
    handlers: dict[str, Callable[[], int]] = {
        "record": lambda: _record_checksum(env_file, args.hash_file),
        "verify": lambda: _verify_checksum(env_file, args.hash_file),
        "check": lambda: EXIT_OK,
    }
    return handlers[command]()


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
