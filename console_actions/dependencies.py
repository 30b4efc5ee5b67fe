"""Dependency container for console actions.

Everything an action needs travels in one explicit object, so no
module keeps mutable state between calls.
"""

from dataclasses import dataclass

from console_actions.config import Config
from console_actions.services.connection import SSHConnector
from console_actions.services.vsphere import VCenterConnector


@dataclass
class Dependencies:
    """Container for configuration and remote connectors.

    Example:
        deps = Dependencies.create()
        result = await action.handler(args, deps)
    """

    config: Config
    vcenter: VCenterConnector
    ssh: SSHConnector

    @classmethod
    def create(cls) -> "Dependencies":
        """Create dependencies from the environment."""
        return cls.from_config(Config.from_env())

    @classmethod
    def from_config(cls, config: Config) -> "Dependencies":
        """Create dependencies with a custom configuration.

        Args:
            config: Custom Config instance

        Returns:
            Dependencies with connectors built from config
        """
        return cls(
            config=config,
            vcenter=VCenterConnector(config.settings),
            ssh=SSHConnector(config),
        )
