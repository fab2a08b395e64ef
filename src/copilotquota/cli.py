"""Summary: Command-line interface for Copilot Quota.

Importance: Shows the resolved credential source and the premium request quota from a terminal.
Alternatives: Build a menu bar or tray application.
"""

from __future__ import annotations

import argparse
import json
import logging
import time

from copilotquota.app import build_services
from copilotquota.config import AppConfig
from copilotquota.errors import AllProvidersFailed, CredentialError
from copilotquota.services import format_status, status_payload


def build_parser() -> argparse.ArgumentParser:
    """Summary: Build the CLI argument parser.

    Importance: Defines supported commands for local operation.
    Alternatives: Use a CLI framework like Typer or Click.
    """

    parser = argparse.ArgumentParser(prog="copilot-quota", description="Copilot quota CLI")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    token = subparsers.add_parser("token", help="Resolve a GitHub token and print its source")
    token.add_argument("--show-token", action="store_true", help="Also print the token")

    subparsers.add_parser("providers", help="List credential providers in priority order")

    quota = subparsers.add_parser("quota", help="Fetch premium request quota")
    quota.add_argument("--json", action="store_true", help="Print JSON instead of text")

    watch = subparsers.add_parser("watch", help="Refresh quota periodically")
    watch.add_argument("--interval", type=int, default=None)
    watch.add_argument("--count", type=int, default=0, help="Stop after N refreshes (0 = forever)")

    serve = subparsers.add_parser("serve", help="Run the local status API")
    serve.add_argument("--host", type=str, default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser


def run_cli(argv: list[str] | None = None) -> int:
    """Summary: Execute CLI commands based on arguments.

    Importance: Drives the user experience without a UI.
    Alternatives: Invoke services via the HTTP API.
    """

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = AppConfig.from_env()
    services = build_services(config)

    if args.command == "token":
        try:
            credential = services.resolve_credential()
        except AllProvidersFailed as exc:
            print(exc.message)
            for line in exc.describe():
                print(f"  {line}")
            return 1
        except CredentialError as exc:
            print(exc.message)
            return 1
        print(f"Source: {credential.source}")
        if args.show_token:
            print(credential.token)
        return 0

    if args.command == "providers":
        for index, name in enumerate(services.provider_names(), start=1):
            print(f"{index}. {name}")
        print(f"VS Code products: {', '.join(config.product_names)}")
        return 0

    if args.command == "quota":
        status = services.refresh()
        if args.json:
            print(json.dumps(status_payload(status), indent=2))
        else:
            print("\n".join(format_status(status, app_name=config.app_name)))
        return 0 if status.ok else 1

    if args.command == "watch":
        interval = args.interval or config.refresh_seconds
        refreshes = 0
        try:
            while True:
                status = services.refresh()
                print("\n".join(format_status(status, app_name=config.app_name)))
                print()
                refreshes += 1
                if args.count and refreshes >= args.count:
                    return 0
                time.sleep(interval)
        except KeyboardInterrupt:
            return 0

    if args.command == "serve":
        import uvicorn

        from copilotquota.api import create_app

        uvicorn.run(
            create_app(config, services=services),
            host=args.host or config.api_host,
            port=args.port or config.api_port,
        )
        return 0

    parser.error(f"Unknown command: {args.command}")
    return 2


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
