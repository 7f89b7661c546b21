"""Command-line entry point: session queries and headless CLI runs."""

import argparse
import logging
import signal
import sys

import orjson
from PySide6.QtCore import QCoreApplication

from gemini_bridge.services.config_manager import ConfigManager
from gemini_bridge.services.gemini_process import GeminiProcessManager, SpawnOptions
from gemini_bridge.services.session_reader import SessionReader


def _write_json(value):
    sys.stdout.buffer.write(orjson.dumps(value) + b"\n")
    sys.stdout.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gemini-bridge", description="Gemini CLI session bridge")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("sessions", help="List sessions for a project")
    p.add_argument("--project", help="Project path or encoded project name")

    p = sub.add_parser("messages", help="Print a session's display messages")
    p.add_argument("session_id")
    p.add_argument("--project", help="Project path or encoded project name")

    p = sub.add_parser("delete", help="Delete a session transcript")
    p.add_argument("session_id")
    p.add_argument("--project", help="Project path or encoded project name")

    p = sub.add_parser("run", help="Run a prompt and stream normalized events")
    p.add_argument("prompt", nargs="?", default="")
    p.add_argument("--session-id", help="Resume this session")
    p.add_argument("--cwd", help="Working directory for the CLI")
    p.add_argument("--model", help="Model for a new session")
    p.add_argument("--yolo", action="store_true", help="Skip permission prompts")

    sub.add_parser("config", help="Print the CLI configuration reported to the UI")
    return parser


def run(argv: list[str] | None = None) -> int:
    """Launch the bridge."""
    args = build_parser().parse_args(argv)

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("Gemini Session Bridge")
    app.setOrganizationName("gemini-session-bridge")

    config = ConfigManager()
    debug = args.debug or config.get_bool("advanced/debugLogging")
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Allow Ctrl+C to kill the app
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    if args.command == "config":
        _write_json(config.cli_config())
        return 0

    if args.command == "run":
        return _run_prompt(args, config)

    reader = SessionReader(
        gemini_home=config.gemini_home(),
        binary=config.gemini_binary(),
        read_retries=config.get_int("sessions/readRetries"),
        retry_delay_ms=config.get_int("sessions/readRetryDelayMs"),
    )
    try:
        if args.command == "sessions":
            _write_json([s.to_dict() for s in reader.list_sessions(args.project)])
            return 0

        if args.command == "messages":
            messages = reader.read_messages(args.session_id, args.project)
            if messages is None:
                print(f"Session {args.session_id} not found", file=sys.stderr)
                return 1
            _write_json({
                "messages": [m.to_dict() for m in messages],
                "total": len(messages),
                "hasMore": False,
            })
            return 0

        if args.command == "delete":
            if not reader.delete_session(args.session_id, args.project):
                print(f"Session {args.session_id} not found", file=sys.stderr)
                return 1
            return 0
    finally:
        reader.close()

    return 2


def _run_prompt(args, config: ConfigManager) -> int:
    manager = GeminiProcessManager(binary=config.gemini_binary())
    options = SpawnOptions(
        session_id=args.session_id,
        cwd=args.cwd,
        model=args.model,
        skip_permissions=args.yolo,
    )
    gemini_run = manager.spawn(args.prompt, options, writer=_write_json)
    try:
        gemini_run.wait(timeout_ms=24 * 60 * 60 * 1000)
    finally:
        manager.cleanup()

    if gemini_run.error:
        print(gemini_run.error, file=sys.stderr)
        return 1
    return 0
