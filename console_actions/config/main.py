"""Application configuration.

Delegates to specialized components:
- SSHConfigParser: Reads ~/.ssh/config
- HostKeyVerifier: Manages known_hosts
- Settings: Environment variables
"""

import logging
import os
from dataclasses import dataclass, field

from console_actions.config.host_keys import HostKeyVerifier
from console_actions.config.parser import SSHConfigParser
from console_actions.config.settings import Settings
from console_actions.models import SSHHost

logger = logging.getLogger(__name__)


def _split_env_list(key: str) -> list[str] | None:
    """Parse a comma-separated environment list, None when unset."""
    value = os.getenv(key, "").strip()
    if not value:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Config:
    """Application configuration.

    Aggregates settings from SSH config, known_hosts, and environment.
    """

    settings: Settings
    parser: SSHConfigParser
    host_keys: HostKeyVerifier
    _hosts_cache: dict[str, SSHHost] | None = field(default=None, init=False, repr=False)

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment.

        Returns:
            Configured instance with all components initialized
        """
        settings = Settings.from_env()

        parser = SSHConfigParser(
            config_path=os.getenv("ACTIONS_SSH_CONFIG") or None,
            allowlist=_split_env_list("ACTIONS_ALLOWLIST"),
            blocklist=_split_env_list("ACTIONS_BLOCKLIST"),
            default_user=settings.windows_user,
        )

        host_keys = HostKeyVerifier(
            known_hosts_path=os.getenv("ACTIONS_KNOWN_HOSTS"),
            strict_checking=Settings._get_bool("ACTIONS_STRICT_HOST_KEY_CHECKING", True),
        )

        return cls(settings=settings, parser=parser, host_keys=host_keys)

    def get_hosts(self) -> dict[str, SSHHost]:
        """Get SSH hosts from config.

        Lazy loads and caches hosts on first call.
        """
        if self._hosts_cache is None:
            self._hosts_cache = self.parser.parse()
        return self._hosts_cache

    def get_host(self, name: str) -> SSHHost | None:
        """Get host by alias from the SSH config."""
        return self.get_hosts().get(name)

    def resolve_windows_host(self, name: str) -> SSHHost | None:
        """Resolve a console-supplied computer name to an SSH target.

        Hosts defined in the SSH config win; any other name is used as a
        hostname directly with the configured Windows user.

        Args:
            name: Computer name or SSH config alias

        Returns:
            SSHHost, or None if the name is excluded by allowlist/blocklist
        """
        if not self.parser.is_host_allowed(name):
            logger.warning("Host %s excluded by allowlist/blocklist", name)
            return None

        host = self.get_host(name)
        if host is not None:
            return host

        return SSHHost(name=name, hostname=name, user=self.settings.windows_user)

    @property
    def command_timeout(self) -> int:
        """Remote command timeout in seconds."""
        return self.settings.command_timeout

    @property
    def connect_timeout(self) -> int:
        """Connection timeout in seconds."""
        return self.settings.connect_timeout

    @property
    def strict_host_key_checking(self) -> bool:
        """Whether to reject unknown host keys."""
        return self.host_keys.strict_checking

    @property
    def known_hosts_path(self) -> str | None:
        """Path to known_hosts file or None if disabled.

        Raises:
            FileNotFoundError: If strict mode and the file is missing
        """
        return self.host_keys.get_known_hosts_path()
