"""SSH sessions to Windows hosts.

One connection per invocation: opened by the action, closed by the
action, never shared.
"""

import logging
from typing import TYPE_CHECKING

import asyncssh

from console_actions.models import CallResult, FailureReason

if TYPE_CHECKING:
    from console_actions.config import Config
    from console_actions.models import SSHHost

logger = logging.getLogger(__name__)


class SSHConnector:
    """Opens and closes SSH sessions using the host-key policy from config."""

    def __init__(self, config: "Config") -> None:
        """Initialize connector.

        Args:
            config: Application configuration (host keys, timeouts)
        """
        self.config = config

    async def _open(
        self,
        host: "SSHHost",
        known_hosts: str | None,
    ) -> asyncssh.SSHClientConnection:
        client_keys = [host.identity_file] if host.identity_file else None
        return await asyncssh.connect(
            host.hostname,
            port=host.port,
            username=host.user,
            known_hosts=known_hosts,
            client_keys=client_keys,
            connect_timeout=self.config.connect_timeout,
        )

    async def connect(
        self,
        host: "SSHHost",
    ) -> CallResult[asyncssh.SSHClientConnection]:
        """Open an SSH session to host.

        Args:
            host: Target host

        Returns:
            CallResult holding the connection, or a CONNECTION failure
        """
        try:
            known_hosts = self.config.known_hosts_path
        except FileNotFoundError as e:
            logger.error("Host key verification misconfigured: %s", e)
            return CallResult.failed(
                FailureReason.CONNECTION,
                f"Cannot connect to {host.name}",
                str(e),
            )

        logger.info(
            "Opening SSH connection to %s (%s@%s:%d)",
            host.name,
            host.user,
            host.hostname,
            host.port,
        )
        try:
            try:
                conn = await self._open(host, known_hosts)
            except asyncssh.HostKeyNotVerifiable as e:
                if self.config.strict_host_key_checking:
                    logger.error(
                        "Host key verification failed for %s: %s. "
                        "Add the host key to %s or set "
                        "ACTIONS_STRICT_HOST_KEY_CHECKING=false",
                        host.name,
                        e,
                        known_hosts,
                    )
                    raise
                logger.warning(
                    "Host key not verified for %s (strict mode disabled): %s",
                    host.name,
                    e,
                )
                conn = await self._open(host, None)
        except (asyncssh.Error, OSError, TimeoutError) as e:
            logger.error("Connection to %s failed: %s", host.name, e)
            return CallResult.failed(
                FailureReason.CONNECTION,
                f"Cannot connect to {host.name}",
                str(e) or type(e).__name__,
            )

        logger.info("SSH connection established to %s", host.name)
        return CallResult.success(conn)

    async def close(self, conn: asyncssh.SSHClientConnection) -> None:
        """Close a session opened by connect()."""
        conn.close()
        await conn.wait_closed()
        logger.debug("SSH connection closed")
