"""vCenter operations through pyVmomi.

All functions here block; actions call them through asyncio.to_thread.
Vendor faults are caught at the call site and returned as CallResult
failures carrying the fault text.
"""

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from pyVim.connect import Disconnect, SmartConnect
from pyVim.task import WaitForTask
from pyVmomi import vim

from console_actions.models import CallResult, FailureReason

if TYPE_CHECKING:
    from console_actions.config import Settings
    from console_actions.models import SnapshotRequest, VCenterEndpoint

logger = logging.getLogger(__name__)

GUEST_RUNNING = "running"


def fault_text(error: Exception) -> str:
    """Readable text for a vSphere fault or any other exception."""
    msg = getattr(error, "msg", None)
    if isinstance(msg, str) and msg:
        return msg
    return str(error) or type(error).__name__


class VCenterConnector:
    """Opens and closes vCenter sessions with the configured credentials."""

    def __init__(self, settings: "Settings") -> None:
        """Initialize connector.

        Args:
            settings: Application settings holding vCenter credentials
        """
        self.settings = settings

    def connect(self, endpoint: "VCenterEndpoint") -> CallResult[Any]:
        """Open a session to vCenter.

        Args:
            endpoint: vCenter host and port

        Returns:
            CallResult holding the service instance, or a CONNECTION failure
        """
        logger.info(
            "Connecting to vCenter %s:%d as %s",
            endpoint.host,
            endpoint.port,
            self.settings.vcenter_user or "<anonymous>",
        )
        try:
            si = SmartConnect(
                host=endpoint.host,
                port=endpoint.port,
                user=self.settings.vcenter_user,
                pwd=self.settings.vcenter_password,
                disableSslCertValidation=not self.settings.vcenter_verify_ssl,
            )
        except Exception as e:
            logger.error("Connection to vCenter %s failed: %s", endpoint.host, fault_text(e))
            return CallResult.failed(
                FailureReason.CONNECTION,
                f"Cannot connect to vCenter {endpoint.host}",
                fault_text(e),
            )

        logger.info("Connected to vCenter %s", endpoint.host)
        return CallResult.success(si)

    def disconnect(self, si: Any) -> None:
        """Close a session opened by connect()."""
        Disconnect(si)
        logger.debug("Disconnected from vCenter")


def find_vm(si: Any, name: str) -> CallResult[Any]:
    """Look up a virtual machine by exact name.

    Args:
        si: vCenter service instance
        name: VM name

    Returns:
        CallResult holding the VM, NOT_FOUND if absent
    """
    try:
        content = si.RetrieveContent()
        container = content.viewManager.CreateContainerView(
            content.rootFolder, [vim.VirtualMachine], True
        )
        try:
            vm = next((candidate for candidate in container.view if candidate.name == name), None)
        finally:
            container.Destroy()
    except Exception as e:
        logger.error("VM lookup for '%s' failed: %s", name, fault_text(e))
        return CallResult.failed(FailureReason.REJECTED, f"Cannot look up VM '{name}'", fault_text(e))

    if vm is None:
        return CallResult.failed(FailureReason.NOT_FOUND, f"VM '{name}' not found")
    logger.debug("Found VM '%s'", name)
    return CallResult.success(vm)


def iter_snapshots(nodes: list[Any] | None) -> Iterator[Any]:
    """Walk a snapshot tree depth-first, yielding every node."""
    for node in nodes or []:
        yield node
        yield from iter_snapshots(node.childSnapshotList)


def snapshot_tree(vm: Any) -> list[Any]:
    """Root snapshot nodes of a VM (empty when it has none)."""
    if vm.snapshot is None:
        return []
    return list(vm.snapshot.rootSnapshotList or [])


def find_snapshots(vm: Any, name: str) -> list[Any]:
    """All snapshot nodes of vm carrying name."""
    return [node for node in iter_snapshots(snapshot_tree(vm)) if node.name == name]


def create_snapshot(vm: Any, request: "SnapshotRequest") -> CallResult[str]:
    """Create a snapshot and wait for the vCenter task.

    Args:
        vm: Virtual machine
        request: Resolved snapshot parameters

    Returns:
        CallResult with the snapshot name, REJECTED on task failure
    """
    logger.info(
        "Creating snapshot '%s' on VM '%s' (memory=%s, quiesce=%s)",
        request.name,
        vm.name,
        request.memory,
        request.quiesce,
    )
    try:
        task = vm.CreateSnapshot_Task(
            name=request.name,
            description=request.description,
            memory=request.memory,
            quiesce=request.quiesce,
        )
        WaitForTask(task)
    except Exception as e:
        logger.error("Snapshot creation on '%s' failed: %s", vm.name, fault_text(e))
        return CallResult.failed(
            FailureReason.REJECTED,
            f"Cannot create snapshot '{request.name}' on VM '{vm.name}'",
            fault_text(e),
        )
    return CallResult.success(request.name)


def remove_snapshot(vm: Any, node: Any) -> CallResult[str]:
    """Remove one snapshot, keeping its children.

    Args:
        vm: Virtual machine owning the snapshot
        node: Snapshot tree node to remove

    Returns:
        CallResult with the snapshot name, REJECTED on task failure
    """
    logger.info("Removing snapshot '%s' from VM '%s'", node.name, vm.name)
    try:
        task = node.snapshot.RemoveSnapshot_Task(removeChildren=False)
        WaitForTask(task)
    except Exception as e:
        logger.error("Snapshot removal on '%s' failed: %s", vm.name, fault_text(e))
        return CallResult.failed(
            FailureReason.REJECTED,
            f"Cannot remove snapshot '{node.name}' from VM '{vm.name}'",
            fault_text(e),
        )
    return CallResult.success(node.name)


def guest_state(vm: Any) -> str:
    """Live guest state reported by guest tools ('running', 'notRunning', ...)."""
    guest = vm.guest
    if guest is None or not guest.guestState:
        return "unknown"
    return str(guest.guestState)


def tools_running(vm: Any) -> bool:
    """Whether guest tools report the guest OS as running."""
    return guest_state(vm) == GUEST_RUNNING


def restart_guest(vm: Any) -> CallResult[None]:
    """Ask guest tools to restart the guest OS.

    RebootGuest returns once the request is accepted; the reboot itself
    proceeds inside the guest.
    """
    logger.info("Requesting guest OS restart for VM '%s'", vm.name)
    try:
        vm.RebootGuest()
    except Exception as e:
        logger.error("Guest restart for '%s' failed: %s", vm.name, fault_text(e))
        return CallResult.failed(
            FailureReason.REJECTED,
            f"Cannot restart guest OS of VM '{vm.name}'",
            fault_text(e),
        )
    return CallResult.success(None)
