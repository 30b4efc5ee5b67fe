"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import getpass
import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


def _default_windows_user() -> str:
    """Current user name, used as the integrated credential for Windows hosts."""
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "Administrator"


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Remote execution
    command_timeout: int = field(default=120)
    connect_timeout: int = field(default=30)
    windows_user: str = field(default_factory=_default_windows_user)

    # vCenter
    vcenter_user: str = field(default="")
    vcenter_password: str = field(default="", repr=False)
    vcenter_port: int = field(default=443)
    vcenter_verify_ssl: bool = field(default=True)

    # Action behaviour
    snapshot_memory: bool = field(default=False)
    snapshot_quiesce: bool = field(default=False)
    verify_tools_status: bool = field(default=False)
    logon_window_minutes: int = field(default=60)

    # Logging
    log_level: str = field(default="WARNING")
    log_colors: bool = field(default=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            command_timeout=cls._get_int("ACTIONS_COMMAND_TIMEOUT", 120),
            connect_timeout=cls._get_int("ACTIONS_CONNECT_TIMEOUT", 30),
            windows_user=os.getenv("ACTIONS_WINDOWS_USER") or _default_windows_user(),
            vcenter_user=os.getenv("ACTIONS_VCENTER_USER", ""),
            vcenter_password=os.getenv("ACTIONS_VCENTER_PASSWORD", ""),
            vcenter_port=cls._get_int("ACTIONS_VCENTER_PORT", 443),
            vcenter_verify_ssl=cls._get_bool("ACTIONS_VCENTER_VERIFY_SSL", True),
            snapshot_memory=cls._get_bool("ACTIONS_SNAPSHOT_MEMORY", False),
            snapshot_quiesce=cls._get_bool("ACTIONS_SNAPSHOT_QUIESCE", False),
            verify_tools_status=cls._get_bool("ACTIONS_VERIFY_TOOLS_STATUS", False),
            logon_window_minutes=cls._get_int("ACTIONS_LOGON_WINDOW_MINUTES", 60),
            log_level=os.getenv("ACTIONS_LOG_LEVEL", "WARNING").upper(),
            log_colors=cls._get_bool("ACTIONS_LOG_COLORS", True),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get a positive integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set or invalid

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            parsed = int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

        if parsed <= 0:
            logger.warning("%s must be > 0, got %d. Using default: %d", key, parsed, default)
            return default
        return parsed

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")
