"""Session handling shared by the actions that run PowerShell remotely."""

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from console_actions.dependencies import Dependencies
from console_actions.models import ActionResult, FailureReason
from console_actions.utils.validation import validate_host

if TYPE_CHECKING:
    import asyncssh

logger = logging.getLogger(__name__)

HostOperation = Callable[["asyncssh.SSHClientConnection"], Awaitable[ActionResult]]


async def run_on_host(
    deps: Dependencies,
    computer: str,
    operation: HostOperation,
) -> ActionResult:
    """Open an SSH session to computer, run operation, close the session.

    Args:
        deps: Injected dependencies
        computer: Computer name or SSH config alias
        operation: Coroutine function receiving the open connection

    Returns:
        The operation's result, or the failure that prevented it
    """
    try:
        computer = validate_host(computer)
    except ValueError as e:
        return ActionResult.failed(FailureReason.ARGUMENTS, str(e))

    host = deps.config.resolve_windows_host(computer)
    if host is None:
        return ActionResult.failed(
            FailureReason.PRECONDITION,
            f"Host '{computer}' is not permitted by the configured allowlist/blocklist",
        )

    opened = await deps.ssh.connect(host)
    if not opened.ok:
        return ActionResult.from_failure(opened.failure)
    conn = opened.unwrap()

    try:
        return await operation(conn)
    finally:
        try:
            await deps.ssh.close(conn)
        except Exception as e:
            logger.warning("Closing SSH connection to %s failed: %s", host.name, e)
