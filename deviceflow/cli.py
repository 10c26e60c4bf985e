"""Terminal front-end for the device flow credential commands.

Example usages::

    # Start a device flow, print the code to enter and wait for approval.
    python -m deviceflow.cli login --open-browser

    # Report whether a usable session is stored (exit code 0 when logged in).
    python -m deviceflow.cli status

    # Print a bearer token for another tool, refreshing it when needed.
    python -m deviceflow.cli token

    # Revoke and forget the stored session.
    python -m deviceflow.cli logout
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import webbrowser
from typing import Awaitable, Callable, Optional

from deviceflow.core.config import get_settings
from deviceflow.core.logging import configure_logging
from deviceflow.dependencies import AuthContext, build_auth_context
from deviceflow.services import AuthCommandError

EXIT_OK = 0
EXIT_NOT_AUTHENTICATED = 2
EXIT_FLOW_EXPIRED = 3
EXIT_RUNTIME_ERROR = 5

_EXIT_BY_KIND = {
    AuthCommandError.NOT_AUTHENTICATED: EXIT_NOT_AUTHENTICATED,
    AuthCommandError.FLOW_EXPIRED: EXIT_FLOW_EXPIRED,
}


async def _login(context: AuthContext, open_browser: bool) -> int:
    info = await context.commands.begin_device_flow()
    print(f"Visit {info.verification_uri} and enter code {info.user_code}")
    if open_browser and not webbrowser.open(info.verification_uri):
        print("Could not open a browser; open the link manually.", file=sys.stderr)

    status = await context.commands.poll_device_flow(
        device_code=info.device_code,
        interval=info.interval,
        expires_in=info.expires_in,
    )
    print(f"Logged in as {status.username}")
    return EXIT_OK


async def _status(context: AuthContext) -> int:
    status = await context.commands.check_status()
    if not status.authenticated:
        print("Not logged in.")
        return EXIT_NOT_AUTHENTICATED
    print(f"Logged in as {status.username}")
    return EXIT_OK


async def _token(context: AuthContext) -> int:
    result = await context.commands.fetch_subsystem_token()
    print(result.token)
    return EXIT_OK


async def _logout(context: AuthContext) -> int:
    await context.commands.logout()
    print("Logged out.")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Log in with the OAuth device flow and manage the stored session."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    login_parser = subparsers.add_parser("login", help="Run the device authorization flow.")
    login_parser.add_argument(
        "--open-browser",
        action="store_true",
        help="Open the verification page in the default browser.",
    )
    subparsers.add_parser("status", help="Report whether a usable session is stored.")
    subparsers.add_parser("token", help="Print a valid access token.")
    subparsers.add_parser("logout", help="Revoke and clear the stored session.")
    return parser


def main(argv: list[str] | None = None, *, context: Optional[AuthContext] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if context is None:
        settings = get_settings()
        configure_logging(settings.log_level, settings.resolved_log_file())
        context = build_auth_context(settings)

    command: str = args.command
    handlers: dict[str, Callable[[], Awaitable[int]]] = {
        "login": lambda: _login(context, args.open_browser),
        "status": lambda: _status(context),
        "token": lambda: _token(context),
        "logout": lambda: _logout(context),
    }

    try:
        return asyncio.run(handlers[command]())
    except AuthCommandError as exc:
        print(exc.message, file=sys.stderr)
        return _EXIT_BY_KIND.get(exc.kind, EXIT_RUNTIME_ERROR)
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
