"""VMware actions: guest restart and snapshot management."""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from console_actions.actions.runner import Action, entry_point
from console_actions.dependencies import Dependencies
from console_actions.models import ActionResult, FailureReason, SnapshotRequest
from console_actions.services import vsphere
from console_actions.utils.url import parse_vcenter_address
from console_actions.utils.validation import validate_name

logger = logging.getLogger(__name__)

PLATFORM = "VMware"
TOOLS_RUNNING = "Running"

DEFAULT_SNAPSHOT_PREFIX = "Snapshot_"
DEFAULT_SNAPSHOT_DESCRIPTION = "Snapshot created by console action"
SNAPSHOT_TIMESTAMP = "%d%m%y%H%M"

VmOperation = Callable[[Any], ActionResult]


def check_platform(platform: str) -> ActionResult | None:
    """Reject anything but the VMware platform literal (case-insensitive)."""
    if platform.strip().lower() == PLATFORM.lower():
        return None
    return ActionResult.failed(
        FailureReason.PLATFORM,
        f"Unsupported hypervisor platform '{platform}'",
        f"only {PLATFORM} is supported",
    )


def resolve_snapshot_name(name: str, now: datetime | None = None) -> str:
    """Snapshot name, or the default prefix plus a ddMMyyHHmm timestamp."""
    if name.strip():
        return name
    stamp = (now or datetime.now()).strftime(SNAPSHOT_TIMESTAMP)
    return f"{DEFAULT_SNAPSHOT_PREFIX}{stamp}"


def resolve_snapshot_description(description: str) -> str:
    """Snapshot description, or the fixed default."""
    return description if description.strip() else DEFAULT_SNAPSHOT_DESCRIPTION


def _check_common(platform: str, vm_name: str) -> ActionResult | None:
    platform_failure = check_platform(platform)
    if platform_failure is not None:
        return platform_failure
    try:
        validate_name(vm_name, "VM name")
    except ValueError as e:
        return ActionResult.failed(FailureReason.ARGUMENTS, str(e))
    return None


async def run_on_vm(
    deps: Dependencies,
    vcenter: str,
    vm_name: str,
    operation: VmOperation,
) -> ActionResult:
    """Connect to vCenter, look up vm_name and apply operation to it.

    The operation runs in a worker thread because pyVmomi blocks. The
    session is closed whatever the outcome once it was opened.
    """
    try:
        endpoint = parse_vcenter_address(vcenter, deps.config.settings.vcenter_port)
    except ValueError as e:
        return ActionResult.failed(FailureReason.ARGUMENTS, "Invalid vCenter address", str(e))

    opened = await asyncio.to_thread(deps.vcenter.connect, endpoint)
    if not opened.ok:
        return ActionResult.from_failure(opened.failure)
    si = opened.unwrap()

    try:
        found = await asyncio.to_thread(vsphere.find_vm, si, vm_name)
        if not found.ok:
            return ActionResult.from_failure(found.failure)
        return await asyncio.to_thread(operation, found.unwrap())
    finally:
        # Teardown errors never replace the operation's result
        try:
            await asyncio.to_thread(deps.vcenter.disconnect, si)
        except Exception as e:
            logger.warning(
                "Disconnect from vCenter %s failed: %s", endpoint.host, vsphere.fault_text(e)
            )


async def restart_guest(args: list[str], deps: Dependencies) -> ActionResult:
    """Restart the guest OS of a VM through guest tools."""
    platform, vcenter, vm_name, tools_status = args
    failure = _check_common(platform, vm_name)
    if failure is not None:
        return failure

    # The console's own reading of the tools state gates the restart
    if tools_status != TOOLS_RUNNING:
        return ActionResult.failed(
            FailureReason.PRECONDITION,
            f"Guest tools on VM '{vm_name}' are not running",
            f"reported status '{tools_status}'",
        )

    verify_live = deps.config.settings.verify_tools_status

    def operation(vm: Any) -> ActionResult:
        if verify_live and not vsphere.tools_running(vm):
            return ActionResult.failed(
                FailureReason.PRECONDITION,
                f"Guest tools on VM '{vm_name}' are not running",
                f"live guest state '{vsphere.guest_state(vm)}'",
            )
        restarted = vsphere.restart_guest(vm)
        if not restarted.ok:
            return ActionResult.from_failure(restarted.failure)
        return ActionResult.succeeded(f"Guest OS restart initiated for VM '{vm_name}'")

    return await run_on_vm(deps, vcenter, vm_name, operation)


async def create_snapshot(args: list[str], deps: Dependencies) -> ActionResult:
    """Create a snapshot unless one with the resolved name exists."""
    platform, vcenter, vm_name, *rest = args
    failure = _check_common(platform, vm_name)
    if failure is not None:
        return failure

    name = rest[0] if len(rest) > 0 else ""
    description = rest[1] if len(rest) > 1 else ""
    settings = deps.config.settings
    request = SnapshotRequest(
        name=resolve_snapshot_name(name),
        description=resolve_snapshot_description(description),
        memory=settings.snapshot_memory,
        quiesce=settings.snapshot_quiesce,
    )

    def operation(vm: Any) -> ActionResult:
        if vsphere.find_snapshots(vm, request.name):
            return ActionResult.failed(
                FailureReason.PRECONDITION,
                f"Snapshot '{request.name}' already exists on VM '{vm_name}'",
            )
        created = vsphere.create_snapshot(vm, request)
        if not created.ok:
            return ActionResult.from_failure(created.failure)
        return ActionResult.succeeded(
            f"Snapshot '{request.name}' created on VM '{vm_name}'"
        )

    return await run_on_vm(deps, vcenter, vm_name, operation)


async def remove_snapshot(args: list[str], deps: Dependencies) -> ActionResult:
    """Remove a single named snapshot."""
    platform, vcenter, vm_name, snapshot_name = args
    failure = _check_common(platform, vm_name)
    if failure is not None:
        return failure
    try:
        validate_name(snapshot_name, "Snapshot name")
    except ValueError as e:
        return ActionResult.failed(FailureReason.ARGUMENTS, str(e))

    def operation(vm: Any) -> ActionResult:
        matches = vsphere.find_snapshots(vm, snapshot_name)
        if not matches:
            return ActionResult.failed(
                FailureReason.NOT_FOUND,
                f"Snapshot '{snapshot_name}' not found on VM '{vm_name}'",
            )
        if len(matches) > 1:
            return ActionResult.failed(
                FailureReason.PRECONDITION,
                f"Snapshot name '{snapshot_name}' is ambiguous on VM '{vm_name}'",
                f"{len(matches)} snapshots share this name",
            )
        removed = vsphere.remove_snapshot(vm, matches[0])
        if not removed.ok:
            return ActionResult.from_failure(removed.failure)
        return ActionResult.succeeded(
            f"Snapshot '{snapshot_name}' removed from VM '{vm_name}'"
        )

    return await run_on_vm(deps, vcenter, vm_name, operation)


RESTART_GUEST = Action(
    name="restart-guest",
    summary="Restart a VM's guest OS through guest tools.",
    arguments=("platform", "vcenter", "vm_name", "tools_status"),
    required=4,
    handler=restart_guest,
)

CREATE_SNAPSHOT = Action(
    name="create-snapshot",
    summary="Create a VM snapshot.",
    arguments=("platform", "vcenter", "vm_name", "snapshot_name", "description"),
    required=3,
    handler=create_snapshot,
)

REMOVE_SNAPSHOT = Action(
    name="remove-snapshot",
    summary="Remove a VM snapshot by name.",
    arguments=("platform", "vcenter", "vm_name", "snapshot_name"),
    required=4,
    handler=remove_snapshot,
)

restart_guest_main = entry_point(RESTART_GUEST)
create_snapshot_main = entry_point(CREATE_SNAPSHOT)
remove_snapshot_main = entry_point(REMOVE_SNAPSHOT)
