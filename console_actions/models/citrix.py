"""Citrix PowerShell capability models."""

from dataclasses import dataclass
from enum import Enum


class ProviderKind(str, Enum):
    """How a PowerShell capability is loaded."""

    SNAPIN = "snapin"
    MODULE = "module"


@dataclass(frozen=True)
class CapabilityProvider:
    """A PowerShell snap-in or module exposing the XenApp cmdlets."""

    name: str
    kind: ProviderKind

    @property
    def label(self) -> str:
        """Human-readable provider label."""
        return f"{self.kind.value} {self.name}"


@dataclass(frozen=True)
class ProviderProbe:
    """Availability of a capability provider on a farm server."""

    provider: CapabilityProvider
    available: bool
    detail: str = ""
