"""Citrix XenApp action: remove a server from a published application."""

from typing import TYPE_CHECKING

from console_actions.actions.runner import Action, entry_point
from console_actions.actions.windows import run_on_host
from console_actions.dependencies import Dependencies
from console_actions.models import ActionResult, FailureReason
from console_actions.services import citrix
from console_actions.utils.validation import validate_host, validate_name

if TYPE_CHECKING:
    import asyncssh


async def remove_app_server(args: list[str], deps: Dependencies) -> ActionResult:
    """Remove a server from a published application's server list."""
    farm_server, application, server = args
    try:
        validate_name(application, "Application name")
        server = validate_host(server)
    except ValueError as e:
        return ActionResult.failed(FailureReason.ARGUMENTS, str(e))

    timeout = deps.config.command_timeout

    async def operation(conn: "asyncssh.SSHClientConnection") -> ActionResult:
        selected = await citrix.select_provider(conn, citrix.XENAPP_PROVIDERS, timeout)
        if not selected.ok:
            return ActionResult.from_failure(selected.failure)
        provider = selected.unwrap()

        listed = await citrix.get_application_servers(conn, provider, application, timeout)
        if not listed.ok:
            return ActionResult.from_failure(listed.failure)

        published = next(
            (name for name in listed.unwrap() if name.lower() == server.lower()),
            None,
        )
        if published is None:
            return ActionResult.failed(
                FailureReason.NOT_FOUND,
                f"Server '{server}' does not publish application '{application}'",
            )

        removed = await citrix.remove_application_server(
            conn, provider, application, published, timeout
        )
        if not removed.ok:
            return ActionResult.from_failure(removed.failure)
        return ActionResult.succeeded(
            f"Server '{published}' removed from published application '{application}'"
        )

    return await run_on_host(deps, farm_server, operation)


REMOVE_APP_SERVER = Action(
    name="remove-app-server",
    summary="Remove a server from a Citrix XenApp published application.",
    arguments=("farm_server", "application", "server"),
    required=3,
    handler=remove_app_server,
)

remove_app_server_main = entry_point(REMOVE_APP_SERVER)
