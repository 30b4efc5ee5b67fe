"""Logon duration diagnostics action."""

from typing import TYPE_CHECKING

from console_actions.actions.runner import Action, entry_point
from console_actions.actions.windows import run_on_host
from console_actions.dependencies import Dependencies
from console_actions.models import ActionResult, FailureReason
from console_actions.services import logon
from console_actions.utils.validation import validate_name

if TYPE_CHECKING:
    import asyncssh


async def logon_duration(args: list[str], deps: Dependencies) -> ActionResult:
    """Narrate the logon phases of a user's latest session."""
    computer, user, *rest = args
    domain = rest[0].strip() if rest else ""
    if "\\" in user:
        user_domain, user = user.split("\\", 1)
        domain = domain or user_domain
    try:
        validate_name(user, "User name")
    except ValueError as e:
        return ActionResult.failed(FailureReason.ARGUMENTS, str(e))

    settings = deps.config.settings

    async def operation(conn: "asyncssh.SSHClientConnection") -> ActionResult:
        collected = await logon.collect_timeline(
            conn,
            computer,
            user,
            domain,
            settings.logon_window_minutes,
            settings.command_timeout,
        )
        if not collected.ok:
            return ActionResult.from_failure(collected.failure)
        return ActionResult.succeeded(logon.format_timeline(collected.unwrap()))

    return await run_on_host(deps, computer, operation)


LOGON_DURATION = Action(
    name="logon-duration",
    summary="Show the logon phase timeline for a user on a Windows computer.",
    arguments=("computer", "user", "domain"),
    required=2,
    handler=logon_duration,
)

logon_duration_main = entry_point(LOGON_DURATION)
