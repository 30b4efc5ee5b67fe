"""Services for console actions."""

from console_actions.services.citrix import (
    XENAPP_PROVIDERS,
    get_application_servers,
    remove_application_server,
    select_provider,
)
from console_actions.services.connection import SSHConnector
from console_actions.services.logon import collect_timeline, format_timeline
from console_actions.services.powershell import (
    invoke_powershell,
    invoke_powershell_json,
    run_powershell,
)
from console_actions.services.vsphere import (
    VCenterConnector,
    create_snapshot,
    find_snapshots,
    find_vm,
    remove_snapshot,
    restart_guest,
    tools_running,
)

__all__ = [
    "SSHConnector",
    "VCenterConnector",
    "XENAPP_PROVIDERS",
    "collect_timeline",
    "create_snapshot",
    "find_snapshots",
    "find_vm",
    "format_timeline",
    "get_application_servers",
    "invoke_powershell",
    "invoke_powershell_json",
    "remove_application_server",
    "remove_snapshot",
    "restart_guest",
    "run_powershell",
    "select_provider",
    "tools_running",
]
