"""Logon diagnostic data models."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class LogonRecord:
    """A single timestamped record gathered from the event log or WMI.

    source is the event log channel name, or "process" for
    Win32_Process creation times (event_id is then 0 and
    name holds the image name).
    """

    source: str
    event_id: int
    time: datetime
    name: str = ""


@dataclass
class LogonPhase:
    """One phase of the logon with its boundaries."""

    name: str
    start: datetime | None = None
    end: datetime | None = None

    @property
    def complete(self) -> bool:
        """Whether both boundaries were found."""
        return self.start is not None and self.end is not None

    @property
    def duration(self) -> float | None:
        """Phase duration in seconds, None if incomplete."""
        if self.start is None or self.end is None:
            return None
        return (self.end - self.start).total_seconds()


@dataclass
class LogonTimeline:
    """Logon phases for one user session on one computer."""

    computer: str
    user: str
    session_start: datetime
    phases: list[LogonPhase] = field(default_factory=list)

    def phase(self, name: str) -> LogonPhase | None:
        """Look up a phase by name."""
        for phase in self.phases:
            if phase.name == name:
                return phase
        return None
