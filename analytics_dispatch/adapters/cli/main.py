"""CLI JSON-lines adapter — dispatches commands from argv/stdin, prints platform status."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Iterable

from analytics_dispatch import create_dispatcher
from analytics_dispatch.core.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

USAGE = (
    "Usage: analytics-cli <category> <name> [key=value ...]\n"
    "   OR  echo '{\"type\":\"event\",\"category\":\"...\",\"name\":\"...\"}' | analytics-cli"
)


def apply_command(dispatcher: Dispatcher, command: dict[str, Any]) -> None:
    """Route one ``{"type": ...}`` command to the dispatcher."""
    kind = command.get("type", "event")
    if kind == "event":
        dispatcher.track_event(command.get("category", ""), command.get("name", ""), command.get("parameters"))
    elif kind == "view":
        dispatcher.track_view(command.get("title", ""))
    elif kind == "user":
        dispatcher.track_user(
            command.get("identifier", ""),
            command.get("email"),
            command.get("full_name"),
            command.get("parameters"),
        )
    elif kind == "stop_user":
        dispatcher.stop_tracking_user(command.get("identifier"))
    elif kind == "opt_out":
        dispatcher.set_opt_out(bool(command.get("value", True)))
    else:
        logger.warning("Unknown command type %r — skipped", kind)


def parse_lines(lines: Iterable[str]) -> list[dict[str, Any]]:
    commands: list[dict[str, Any]] = []
    for lineno, raw in enumerate(lines, 1):
        raw = raw.strip()
        if not raw:
            continue
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("line %d: invalid JSON (%s) — skipped", lineno, exc)
            continue
        if isinstance(data, dict):
            commands.append(data)
        else:
            logger.warning("line %d: expected a JSON object — skipped", lineno)
    return commands


def parse_argv(args: list[str]) -> dict[str, Any]:
    category, name, *pairs = args
    parameters: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if sep:
            parameters[key] = value
    return {"type": "event", "category": category, "name": name, "parameters": parameters or None}


def run_cli(commands: list[dict[str, Any]], dispatcher: Dispatcher | None = None) -> None:
    dispatcher = dispatcher or create_dispatcher()
    try:
        for command in commands:
            apply_command(dispatcher, command)
    finally:
        dispatcher.shutdown()
    for status in dispatcher.platform_statuses():
        print(json.dumps(status.model_dump(mode="json")), flush=True)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if len(sys.argv) > 2:
        commands = [parse_argv(sys.argv[1:])]
    elif len(sys.argv) == 2:
        print(USAGE, file=sys.stderr)
        sys.exit(1)
    else:
        commands = parse_lines(sys.stdin)
        if not commands:
            print(USAGE, file=sys.stderr)
            sys.exit(1)

    run_cli(commands)


if __name__ == "__main__":
    main()
