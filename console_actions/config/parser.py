"""SSH config file parser.

Reads ~/.ssh/config and extracts the Windows host catalogue with
allowlist/blocklist filtering.
"""

import logging
import os
import re
from fnmatch import fnmatch
from pathlib import Path

from console_actions.models import SSHHost

logger = logging.getLogger(__name__)


class SSHConfigParser:
    """Parser for SSH config files.

    Reads SSH config format and extracts host definitions.
    Supports allowlist/blocklist filtering with shell-style patterns.
    """

    def __init__(
        self,
        config_path: Path | str | None = None,
        allowlist: list[str] | None = None,
        blocklist: list[str] | None = None,
        default_user: str = "Administrator",
    ):
        """Initialize SSH config parser.

        Args:
            config_path: Path to SSH config file (default: ~/.ssh/config)
            allowlist: Only include hosts matching these patterns (if set)
            blocklist: Exclude hosts matching these patterns
            default_user: User for hosts without a User directive
        """
        if config_path is None:
            config_path = Path.home() / ".ssh" / "config"

        self.config_path = Path(config_path)
        self.allowlist = list(allowlist) if allowlist else []
        self.blocklist = list(blocklist) if blocklist else []
        self.default_user = default_user

    def parse(self) -> dict[str, SSHHost]:
        """Parse SSH config and return host definitions.

        Returns:
            Dictionary mapping host alias to SSHHost objects
        """
        if not self.config_path.exists():
            logger.debug("SSH config not found: %s", self.config_path)
            return {}

        try:
            content = self.config_path.read_text()
            logger.debug("Reading SSH config from %s", self.config_path)
        except (OSError, PermissionError) as e:
            logger.warning("Cannot read SSH config %s: %s", self.config_path, e)
            return {}

        hosts: dict[str, SSHHost] = {}
        current_host: str | None = None
        current_data: dict[str, str] = {}
        global_defaults: dict[str, str] = {}

        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            host_match = re.match(r"^Host\s+(\S+)", line, re.IGNORECASE)
            if host_match:
                self._store(hosts, current_host, current_data)
                current_host = host_match.group(1)
                # "Host *" contributes defaults; other patterns are skipped
                if current_host != "*" and ("*" in current_host or "?" in current_host):
                    current_host = None
                current_data = global_defaults.copy() if current_host != "*" else {}
                continue

            kv_match = re.match(r"^(\w+)\s+(.+)$", line)
            if kv_match and current_host:
                key = kv_match.group(1).lower()
                value = kv_match.group(2).strip()
                if key == "identityfile":
                    value = os.path.expanduser(value)
                current_data[key] = value
                if current_host == "*":
                    global_defaults[key] = value

        self._store(hosts, current_host, current_data)

        logger.info("Parsed %d hosts from %s", len(hosts), self.config_path)
        return hosts

    def _store(
        self,
        hosts: dict[str, SSHHost],
        name: str | None,
        data: dict[str, str],
    ) -> None:
        """Add a finished Host block to the catalogue if it qualifies."""
        if not name or name == "*" or not data.get("hostname"):
            return
        if not self.is_host_allowed(name):
            return

        try:
            port = int(data.get("port", "22"))
        except ValueError:
            port = 22
        hosts[name] = SSHHost(
            name=name,
            hostname=data["hostname"],
            user=data.get("user", self.default_user),
            port=port,
            identity_file=data.get("identityfile"),
        )

    def is_host_allowed(self, name: str) -> bool:
        """Check if host passes allowlist/blocklist filters.

        Args:
            name: Host name to check

        Returns:
            True if host is allowed
        """
        lowered = name.lower()
        # Allowlist takes precedence
        if self.allowlist:
            return any(fnmatch(lowered, pattern.lower()) for pattern in self.allowlist)

        if self.blocklist:
            return not any(fnmatch(lowered, pattern.lower()) for pattern in self.blocklist)

        return True
