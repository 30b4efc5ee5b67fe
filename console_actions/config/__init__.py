"""Configuration module for console actions.

Provides focused classes for different configuration concerns:
- Config: Main configuration class (aggregates all components)
- SSHConfigParser: Parses ~/.ssh/config files
- HostKeyVerifier: Manages SSH host key verification
- Settings: Environment variable configuration
"""

from console_actions.config.host_keys import HostKeyVerifier
from console_actions.config.main import Config
from console_actions.config.parser import SSHConfigParser
from console_actions.config.settings import Settings

__all__ = ["Config", "SSHConfigParser", "HostKeyVerifier", "Settings"]
