from __future__ import annotations

# Single entrypoint.
#
#     python -m counter_queue.app serve [--room room-1="Room 1" ...]
#     python -m counter_queue.app visitor [--ticket-id N]
#     python -m counter_queue.app staff <action> ...
#     python -m counter_queue.app generate --rate 6
#
# Each subcommand forwards its remaining arguments to the matching module's
# own `main()`, so `counter-queue staff -h` shows the full staff help.

import argparse
import importlib
import sys

_COMMANDS = {
    "serve": ("counter_queue.service", "Start the queue service"),
    "visitor": ("counter_queue.visitor", "Take a ticket or check a ticket's progress"),
    "staff": ("counter_queue.staff", "Run one staff action (login required)"),
    "generate": ("counter_queue.generator", "Simulate arriving visitors"),
}


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv

    parser = argparse.ArgumentParser(description="Counter Queue System (MQTT) - main entrypoint")
    sub = parser.add_subparsers(dest="cmd", required=True)
    for name, (_module, help_text) in _COMMANDS.items():
        sub.add_parser(name, help=help_text)

    if not argv or argv[0] not in _COMMANDS:
        # Prints help / usage errors and exits.
        parser.parse_args(argv)
        return

    cmd, rest = argv[0], argv[1:]
    module = importlib.import_module(_COMMANDS[cmd][0])
    _dispatch_to_module_main(module.main, rest, prog=f"{parser.prog} {cmd}")


def _dispatch_to_module_main(module_main, argv: list[str], *, prog: str) -> None:
    old_argv = sys.argv[:]
    try:
        sys.argv = [prog, *argv]
        module_main()
    finally:
        sys.argv = old_argv


if __name__ == "__main__":
    main()
