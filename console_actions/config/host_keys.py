"""SSH host key verification.

Manages known_hosts file for MITM prevention.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class HostKeyVerifier:
    """SSH host key verification manager.

    Resolution is lazy so that actions which never open an SSH session
    (the vCenter ones) do not depend on a known_hosts file.
    """

    def __init__(
        self,
        known_hosts_path: str | None = None,
        strict_checking: bool = True,
    ):
        """Initialize host key verifier.

        Args:
            known_hosts_path: Path to known_hosts file or 'none' to disable
            strict_checking: Reject unknown host keys
        """
        self.strict_checking = strict_checking
        self._configured = known_hosts_path
        self._resolved = False
        self._known_hosts: str | None = None

    def _resolve_known_hosts(self, env_value: str | None) -> str | None:
        """Resolve known_hosts path with security defaults.

        Returns:
            Path to known_hosts file or None to disable verification

        Raises:
            FileNotFoundError: If strict mode and file missing
        """
        if env_value and env_value.lower() == "none":
            logger.critical(
                "SSH host key verification DISABLED (ACTIONS_KNOWN_HOSTS=none). "
                "Connections are vulnerable to man-in-the-middle attacks."
            )
            return None

        path = (
            Path(os.path.expanduser(env_value))
            if env_value
            else Path.home() / ".ssh" / "known_hosts"
        )
        if not path.exists():
            if self.strict_checking:
                raise FileNotFoundError(
                    f"SSH host key verification required but known_hosts "
                    f"file not found: {path}\n\n"
                    f"To fix this:\n"
                    f"1. Add host keys: ssh-keyscan <hostname> >> {path}\n"
                    f"2. Or point ACTIONS_KNOWN_HOSTS at an existing file\n"
                    f"3. Or disable verification (NOT RECOMMENDED): "
                    f"ACTIONS_KNOWN_HOSTS=none"
                )
            logger.warning(
                "known_hosts not found at %s, verification disabled. "
                "This is insecure!",
                path,
            )
            return None

        return str(path)

    def get_known_hosts_path(self) -> str | None:
        """Get path to known_hosts file.

        Returns:
            Path string or None if verification disabled

        Raises:
            FileNotFoundError: If strict mode and file missing
        """
        if not self._resolved:
            self._known_hosts = self._resolve_known_hosts(self._configured)
            self._resolved = True
        return self._known_hosts

    def is_enabled(self) -> bool:
        """Check if host key verification is enabled."""
        return self.get_known_hosts_path() is not None
