"""Shared action runner.

Every action follows the same shape: check the positional arguments,
open a session, perform one remote operation, report, close the
session. The runner owns the parts that do not depend on the action:
arity checks, logging setup, console feedback and exit codes.
"""

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TextIO

from console_actions.config import Settings
from console_actions.dependencies import Dependencies
from console_actions.models import ActionResult, FailureReason
from console_actions.utils.console import ColorfulFormatter

logger = logging.getLogger(__name__)

Handler = Callable[[list[str], Dependencies], Awaitable[ActionResult]]

NOISY_LOGGERS = ("asyncssh", "pyVmomi", "urllib3")


@dataclass(frozen=True)
class Action:
    """A console action and its positional argument contract."""

    name: str
    summary: str
    arguments: tuple[str, ...]
    required: int
    handler: Handler

    @property
    def usage(self) -> str:
        """Usage line, optional arguments in brackets."""
        parts = [
            f"<{arg}>" if index < self.required else f"[{arg}]"
            for index, arg in enumerate(self.arguments)
        ]
        return " ".join([self.name, *parts])

    def check_arity(self, args: list[str]) -> ActionResult | None:
        """Return a failure when the argument count is out of range."""
        if self.required <= len(args) <= len(self.arguments):
            return None
        return ActionResult.failed(
            FailureReason.ARGUMENTS,
            f"{self.name} expects {self._expected()} argument(s), got {len(args)}",
            f"usage: {self.usage}",
        )

    def _expected(self) -> str:
        if self.required == len(self.arguments):
            return str(self.required)
        return f"{self.required} to {len(self.arguments)}"


def configure_logging(settings: Settings) -> None:
    """Configure logging for the console_actions logger tree.

    Log lines go to stderr; the console-facing result text is written
    separately by emit().
    """
    use_colors = settings.log_colors and sys.stderr.isatty()

    root = logging.getLogger("console_actions")
    root.setLevel(getattr(logging, settings.log_level, logging.WARNING))

    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        root.addHandler(handler)
        root.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


async def execute(action: Action, args: list[str], deps: Dependencies) -> ActionResult:
    """Run one action to completion.

    Argument problems are reported without touching the network. Any
    exception escaping the handler becomes a failure carrying its text.
    """
    arity_failure = action.check_arity(args)
    if arity_failure is not None:
        return arity_failure

    logger.info("Running %s with %d argument(s)", action.name, len(args))
    try:
        result = await action.handler(args, deps)
    except Exception as e:
        logger.exception("%s raised an unexpected error", action.name)
        return ActionResult.failed(
            FailureReason.REJECTED,
            f"{action.name} failed",
            str(e) or type(e).__name__,
        )

    if result.success:
        logger.info("%s completed", action.name)
    else:
        logger.warning("%s failed: %s", action.name, result.message)
    return result


def emit(
    result: ActionResult,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Write the result for the console and return the exit code."""
    if result.success:
        print(result.message, file=stdout or sys.stdout)
    else:
        print(f"ERROR: {result.message}", file=stderr or sys.stderr)
    return result.exit_code


def run(action: Action, argv: list[str], deps: Dependencies | None = None) -> int:
    """Run an action from positional console arguments.

    Args:
        action: Action to run
        argv: Positional arguments (without the program name)
        deps: Injected dependencies, created from the environment if None

    Returns:
        Process exit code (0 success, 1 failure)
    """
    arity_failure = action.check_arity(argv)
    if arity_failure is not None:
        return emit(arity_failure)

    if deps is None:
        deps = Dependencies.create()
    configure_logging(deps.config.settings)

    return emit(asyncio.run(execute(action, argv, deps)))


def entry_point(action: Action) -> Callable[[], None]:
    """Build a console-script entry point for action."""

    def main() -> None:
        sys.exit(run(action, sys.argv[1:]))

    main.__doc__ = action.summary
    return main
