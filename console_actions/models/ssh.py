"""SSH-related data models."""

from dataclasses import dataclass


@dataclass
class SSHHost:
    """SSH host configuration.

    Windows hosts reached through OpenSSH for PowerShell execution
    (Citrix farm servers, logon diagnostic targets).
    """

    name: str
    hostname: str
    user: str = "Administrator"
    port: int = 22
    identity_file: str | None = None
