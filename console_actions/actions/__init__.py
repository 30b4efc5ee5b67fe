"""Console actions and their registry."""

from console_actions.actions.citrix import REMOVE_APP_SERVER
from console_actions.actions.logon import LOGON_DURATION
from console_actions.actions.runner import Action, execute, run
from console_actions.actions.vmware import CREATE_SNAPSHOT, REMOVE_SNAPSHOT, RESTART_GUEST

ACTIONS: dict[str, Action] = {
    action.name: action
    for action in (
        RESTART_GUEST,
        CREATE_SNAPSHOT,
        REMOVE_SNAPSHOT,
        REMOVE_APP_SERVER,
        LOGON_DURATION,
    )
}

__all__ = [
    "ACTIONS",
    "Action",
    "CREATE_SNAPSHOT",
    "LOGON_DURATION",
    "REMOVE_APP_SERVER",
    "REMOVE_SNAPSHOT",
    "RESTART_GUEST",
    "execute",
    "run",
]
