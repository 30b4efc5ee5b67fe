"""Entry point for console actions.

Usage: console-actions <action> <arguments...>
"""

import sys
from typing import TextIO

from console_actions.actions import ACTIONS, run


def _print_actions(stream: TextIO) -> None:
    print("Available actions:", file=stream)
    for action in ACTIONS.values():
        print(f"  {action.usage}", file=stream)
        print(f"      {action.summary}", file=stream)


def main(argv: list[str] | None = None) -> int:
    """Dispatch to the named action.

    Args:
        argv: Arguments after the program name (default: sys.argv[1:])

    Returns:
        Process exit code
    """
    argv = sys.argv[1:] if argv is None else argv

    if argv and argv[0] in ("-l", "--list", "-h", "--help"):
        _print_actions(sys.stdout)
        return 0

    if not argv or argv[0] not in ACTIONS:
        if argv:
            print(f"ERROR: unknown action '{argv[0]}'", file=sys.stderr)
        else:
            print("ERROR: no action given", file=sys.stderr)
        _print_actions(sys.stderr)
        return 1

    return run(ACTIONS[argv[0]], argv[1:])


if __name__ == "__main__":
    sys.exit(main())
