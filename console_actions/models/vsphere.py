"""vSphere-related data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class VCenterEndpoint:
    """vCenter address derived from a console-supplied server name or URL."""

    host: str
    port: int = 443


@dataclass(frozen=True)
class SnapshotRequest:
    """Resolved parameters for a snapshot creation."""

    name: str
    description: str
    memory: bool = False
    quiesce: bool = False
