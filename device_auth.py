"""Command line interface for blinded challenge-response device authentication."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Dict

from pydantic import ValidationError

from deviceauth.config import Settings
from deviceauth.exceptions import AlreadyInitialized, DeviceAuthError, NotInitialized
from deviceauth.log import configure_logging
from deviceauth.registry import JsonRegistry
from deviceauth.service import DeviceAuthService
from deviceauth.verifier import Challenge, derive_commitment, respond_to_challenge

DEFAULT_STORE = "devices.json"

logger = logging.getLogger("deviceauth.cli")


def _hex(value: str) -> int:
    try:
        parsed = int(value, 16)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"'{value}' is not hex encoded") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("Value must be non-negative")
    return parsed


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--store",
        help=f"Location of the JSON store (default: $DEVICEAUTH_STORE or {DEFAULT_STORE})",
    )
    parser.add_argument("--log-level", help="Logging level (default: $DEVICEAUTH_LOG_LEVEL or WARNING)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Fix the global parameters for a store")
    init_parser.add_argument("--generator", type=int, help="Generator (decimal)")
    init_parser.add_argument("--modulus", type=int, help="Prime modulus (decimal)")
    init_parser.add_argument(
        "--check-primality",
        action="store_true",
        default=None,
        help="Reject a composite modulus",
    )

    subparsers.add_parser("params", help="Show the global parameters")

    commit_parser = subparsers.add_parser(
        "commit",
        help="Device side: derive the commitment for a secret",
    )
    commit_parser.add_argument("secret", type=_hex, help="Hex-encoded device secret")

    register_parser = subparsers.add_parser("register", help="Store a commitment for an identity")
    register_parser.add_argument("identity", help="Opaque device identity")
    register_parser.add_argument("commitment", type=_hex, help="Hex-encoded commitment")

    subparsers.add_parser("challenge", help="Issue a random challenge")

    respond_parser = subparsers.add_parser(
        "respond",
        help="Device side: compute the blinded response to a challenge",
    )
    respond_parser.add_argument("commitment", type=_hex, help="Hex-encoded commitment")
    respond_parser.add_argument("exponent", type=_hex, help="Hex-encoded challenge exponent")
    respond_parser.add_argument("multiplier", type=_hex, help="Hex-encoded challenge multiplier")

    verify_parser = subparsers.add_parser("verify", help="Verify a challenge response")
    verify_parser.add_argument("identity", help="Opaque device identity")
    verify_parser.add_argument("exponent", type=_hex, help="Hex-encoded challenge exponent")
    verify_parser.add_argument("response", type=_hex, help="Hex-encoded response product")
    verify_parser.add_argument("multiplier", type=_hex, help="Hex-encoded challenge multiplier")
    verify_parser.add_argument(
        "--zero-means-unregistered",
        action="store_true",
        default=None,
        help="Treat a stored commitment of zero as unregistered",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser.parse_args(argv)


def load_settings(namespace: argparse.Namespace) -> Settings:
    overrides: Dict[str, object] = {}
    if namespace.store:
        overrides["store"] = namespace.store
    if namespace.log_level:
        overrides["log_level"] = namespace.log_level
    for name in ("generator", "modulus", "check_primality", "zero_means_unregistered"):
        value = getattr(namespace, name, None)
        if value is not None:
            overrides[name] = value
    settings = Settings(**overrides)
    if not settings.store:
        settings = Settings(**overrides, store=DEFAULT_STORE)
    return settings


def _emit(payload: Dict[str, object]) -> int:
    print(json.dumps(payload, indent=2))
    return 0


def _init(settings: Settings) -> Dict[str, object]:
    registry = JsonRegistry(settings.store or DEFAULT_STORE)
    if registry.read_parameters() is not None:
        raise AlreadyInitialized(f"Store '{registry.path}' is already initialized")
    service = DeviceAuthService(registry, check_primality=settings.check_primality)
    params = service.initialize(settings.generator, settings.modulus)
    return {"parameters": params.to_dict(), "store": registry.path}


def run(namespace: argparse.Namespace, settings: Settings) -> int:
    if namespace.command == "init":
        return _emit(_init(settings))

    if namespace.command == "serve":
        import uvicorn

        from deviceauth.server import create_app

        app = create_app(DeviceAuthService.from_settings(settings))
        uvicorn.run(app, host=namespace.host, port=namespace.port, log_level=settings.log_level.lower())
        return 0

    service = DeviceAuthService.from_settings(settings)
    if not service.initialized:
        raise NotInitialized(f"Store '{settings.store}' has no parameters; run 'init' first")
    params = service.params

    if namespace.command == "params":
        return _emit({"parameters": params.to_dict()})

    if namespace.command == "commit":
        commitment = derive_commitment(namespace.secret, params)
        return _emit({"commitment": hex(commitment)})

    if namespace.command == "register":
        service.register(namespace.identity, namespace.commitment)
        return _emit({"identity": namespace.identity, "commitment": hex(namespace.commitment)})

    if namespace.command == "challenge":
        return _emit({"challenge": service.issue_challenge().to_dict()})

    if namespace.command == "respond":
        challenge = Challenge(exponent=namespace.exponent, multiplier=namespace.multiplier)
        response = respond_to_challenge(namespace.commitment, challenge, params)
        return _emit({"challenge": challenge.to_dict(), "response": hex(response)})

    if namespace.command == "verify":
        verified = service.verify(
            namespace.identity,
            namespace.exponent,
            namespace.response,
            namespace.multiplier,
        )
        return _emit({"identity": namespace.identity, "verified": verified})

    raise RuntimeError("Unreachable")


def main(argv: list[str] | None = None) -> int:
    namespace = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        settings = load_settings(namespace)
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1
    configure_logging(settings.log_level)
    try:
        return run(namespace, settings)
    except DeviceAuthError as exc:
        logger.debug("Command %s failed", namespace.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
