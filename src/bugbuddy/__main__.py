"""Command-line entry point for BugBuddy.

This module provides the ``bugbuddy`` command. It handles:
- Configuration loading
- Logging setup with secret sanitization
- Credential lookup (secret store, .env, interactive prompt)
- The check / simplify / watch / update-key commands
"""

import argparse
import asyncio
import contextlib
import getpass
import signal
import sys
from collections.abc import Callable
from pathlib import Path

import structlog
from pydantic import ValidationError

from bugbuddy._version import __version__
from bugbuddy.config.credentials import PROVIDER_LABELS, CredentialStore, CredentialStoreError
from bugbuddy.config.loader import analysis_settings, load_config
from bugbuddy.config.schema import BugBuddyConfig
from bugbuddy.core.context_gatherer import CodeContextGatherer
from bugbuddy.core.error_detector import ErrorDetector
from bugbuddy.core.session import BugBuddySession
from bugbuddy.core.simplifier import ErrorSimplifier
from bugbuddy.core.watcher import DocumentWatcher
from bugbuddy.models.document import SourceDocument
from bugbuddy.models.result import SimplifyOutcome
from bugbuddy.presentation.terminal import Notifier
from bugbuddy.utils.async_helpers import SettingsError
from bugbuddy.utils.logging import bind_context

log = structlog.get_logger()

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_MISSING_CREDENTIAL = 2


def setup_logging(
    debug: bool = False,
    verbose: bool = False,
    log_format: str | None = None,
    config: BugBuddyConfig | None = None,
) -> None:
    """Configure structured logging from CLI flags and, if loaded, the config file.

    Args:
        debug: Enable debug logging if True
        verbose: Enable info logging if True
        log_format: Output format ("json" or "console"); None defers to the config
        config: Loaded configuration; its level and format apply when no flag is given
    """
    from bugbuddy.utils.logging import LogLevel, configure_logging

    if debug:
        level: str = LogLevel.DEBUG
    elif verbose:
        level = LogLevel.INFO
    elif config is not None:
        level = config.logging.level
    else:
        level = LogLevel.WARNING

    if log_format is None:
        log_format = config.logging.format if config is not None else "console"

    file_enabled = bool(config and config.logging.file.enabled)
    configure_logging(
        level=level,
        log_format=log_format,
        file_path=config.logging.file.path if config and file_enabled else None,
        file_enabled=file_enabled,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="bugbuddy",
        description="BugBuddy - plain-language explanations for runtime errors",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./bugbuddy.yaml if present)",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable info logging")
    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default=None,
        help="Log output format (default: logging.format from the config, else console)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    check = commands.add_parser("check", help="Scan a file for an error signature")
    check.add_argument("file", type=Path)
    check.add_argument("--language", help="Language id (default: from the file extension)")
    check.add_argument("--line", type=int, default=1, help="Cursor line, 1-based (default: 1)")

    simplify = commands.add_parser("simplify", help="Explain the error found in a file")
    simplify.add_argument("file", type=Path)
    simplify.add_argument("--language", help="Language id (default: from the file extension)")
    simplify.add_argument(
        "--line",
        type=int,
        default=None,
        help="Line to gather context around, 1-based (default: the detected error line)",
    )
    source = simplify.add_mutually_exclusive_group()
    source.add_argument("--error", help="Terminal output to scan instead of the file text")
    source.add_argument(
        "--stdin",
        action="store_true",
        help="Read terminal output to scan from standard input",
    )
    simplify.add_argument(
        "--no-prompt",
        action="store_true",
        help="Never ask for an API key interactively",
    )

    watch = commands.add_parser("watch", help="Re-scan a file whenever it changes")
    watch.add_argument("file", type=Path)
    watch.add_argument("--language", help="Language id (default: from the file extension)")

    update_key = commands.add_parser("update-key", help="Store a new API key")
    update_key.add_argument(
        "--provider",
        choices=sorted(PROVIDER_LABELS),
        default=None,
        help="Provider the key is for (default: the configured provider)",
    )

    return parser.parse_args(argv)


def _interactive_prompt(allowed: bool) -> Callable[[str], str] | None:
    if allowed and sys.stdin.isatty():
        return getpass.getpass
    return None


def build_session(
    config: BugBuddyConfig,
    config_path: Path | None,
    credentials: CredentialStore,
    api_key: str | None = None,
) -> BugBuddySession:
    """Assemble a session from configuration.

    The context gatherer re-reads the configuration file on every gather.
    Without ``api_key`` the session can detect errors but not explain them.
    """
    return BugBuddySession(
        detector=ErrorDetector(),
        gatherer=CodeContextGatherer(lambda: analysis_settings(config_path)),
        simplifier=ErrorSimplifier(config.llm, api_key),
        credentials=credentials,
    )


def run_check(args: argparse.Namespace, session: BugBuddySession) -> int:
    """Detection only: print the status label and the error, if any."""
    document = SourceDocument.from_path(args.file, args.language)
    match = session.check_for_errors(document, cursor_line=max(0, args.line - 1))

    session.terminal.print(session.status.render())
    if match is None:
        return EXIT_OK

    session.terminal.print(match.message)
    line = session.highlighter.highlighted_line
    if line is not None:
        context = session.gatherer.get_context(document, line)
        if context is not None:
            session.terminal.print()
            session.terminal.print(session.highlighter.render(context))
    return EXIT_OK


async def run_simplify(args: argparse.Namespace, session: BugBuddySession) -> int:
    """Full pipeline: detect, gather context, explain, render."""
    document = SourceDocument.from_path(args.file, args.language)

    text = None
    if args.stdin:
        text = sys.stdin.read()
    elif args.error is not None:
        text = args.error

    session.check_for_errors(document, text=text)

    if args.line is not None:
        cursor_line = max(0, args.line - 1)
    else:
        cursor_line = session.highlighter.highlighted_line or 0

    report = await session.simplify_current_error(document, cursor_line)
    if report.outcome is SimplifyOutcome.MISSING_CREDENTIAL:
        return EXIT_MISSING_CREDENTIAL
    return EXIT_OK if report.ok else EXIT_FAILURE


async def run_watch(args: argparse.Namespace, session: BugBuddySession, config: BugBuddyConfig) -> int:
    """Watch a file until interrupted."""
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    watcher = DocumentWatcher(
        args.file,
        session,
        language=args.language,
        debounce_seconds=config.watch.debounce_seconds,
        poll_interval=config.watch.poll_interval,
    )
    await watcher.run(stop)
    return EXIT_OK


async def run_update_key(
    args: argparse.Namespace,
    config: BugBuddyConfig,
    config_path: Path | None,
    credentials: CredentialStore,
) -> int:
    """Prompt for an API key and hand it to the session to store."""
    if args.provider is not None:
        llm = config.llm.model_copy(update={"provider": args.provider})
        config = config.model_copy(update={"llm": llm})
    label = PROVIDER_LABELS[config.llm.provider]

    api_key = getpass.getpass(f"Enter your {label} API key: ")
    session = build_session(config, config_path, credentials)
    try:
        await session.update_api_key(api_key)
    except ValueError:
        session.notifier.show_error("No key entered; nothing changed.")
        return EXIT_FAILURE
    finally:
        await session.aclose()
    return EXIT_OK


async def run_command(args: argparse.Namespace) -> int:
    """Run the selected command.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        log.error("configuration_file_not_found", path=str(args.config), error=str(e))
        return EXIT_FAILURE
    except (ValueError, ValidationError) as e:
        log.error("configuration_invalid", error=str(e))
        return EXIT_FAILURE

    setup_logging(args.debug, args.verbose, args.format, config)
    bind_context(command=args.command)
    credentials = CredentialStore(config.credentials)
    notifier = Notifier()

    try:
        if args.command == "update-key":
            return await run_update_key(args, config, args.config, credentials)

        api_key = None
        if args.command == "simplify":
            prompt = _interactive_prompt(not args.no_prompt)
            api_key = credentials.resolve(config.llm.provider, prompt=prompt)

        session = build_session(config, args.config, credentials, api_key=api_key)
        try:
            if args.command == "check":
                return run_check(args, session)
            if args.command == "simplify":
                return await run_simplify(args, session)
            return await run_watch(args, session, config)
        finally:
            await session.aclose()

    except SettingsError as e:
        notifier.show_error(f"Could not read settings: {e}")
        return EXIT_FAILURE
    except OSError as e:
        log.error("file_unreadable", error=str(e))
        notifier.show_error(f"Cannot read {getattr(args, 'file', '')}: {e}")
        return EXIT_FAILURE
    except CredentialStoreError as e:
        log.error("credential_store_failed", error=str(e))
        notifier.show_error(str(e))
        return EXIT_FAILURE


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(debug=args.debug, verbose=args.verbose, log_format=args.format)

    try:
        return asyncio.run(run_command(args))
    except KeyboardInterrupt:
        log.info("shutting_down_gracefully")
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
