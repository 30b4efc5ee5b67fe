"""Data models for console actions."""

from console_actions.models.citrix import CapabilityProvider, ProviderKind, ProviderProbe
from console_actions.models.command import CommandResult
from console_actions.models.logon import LogonPhase, LogonRecord, LogonTimeline
from console_actions.models.result import (
    ActionResult,
    CallResult,
    Failure,
    FailureReason,
)
from console_actions.models.ssh import SSHHost
from console_actions.models.vsphere import SnapshotRequest, VCenterEndpoint

__all__ = [
    "ActionResult",
    "CallResult",
    "CapabilityProvider",
    "CommandResult",
    "Failure",
    "FailureReason",
    "LogonPhase",
    "LogonRecord",
    "LogonTimeline",
    "ProviderKind",
    "ProviderProbe",
    "SSHHost",
    "SnapshotRequest",
    "VCenterEndpoint",
]
