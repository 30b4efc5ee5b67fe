"""vCenter address parsing.

The console hands over either a bare server name or a full SDK URL
such as ``https://vcenter.example.com/sdk``; pyVmomi wants the host
and port separately.
"""

import re

from console_actions.models import VCenterEndpoint

_AUTHORITY = re.compile(r"^(?:[A-Za-z][A-Za-z0-9+.\-]*://)?(?P<authority>[^/?#]*)")


def _split_authority(authority: str) -> tuple[str, str | None]:
    """Split host[:port] into its parts, honouring [IPv6] brackets."""
    if authority.startswith("["):
        end = authority.find("]")
        if end == -1:
            raise ValueError(f"Unterminated IPv6 address: {authority!r}")
        host = authority[1:end]
        rest = authority[end + 1:]
        port = rest[1:] if rest.startswith(":") else None
        return host, port

    if authority.count(":") == 1:
        host, port = authority.split(":", 1)
        return host, port
    return authority, None


def parse_vcenter_address(address: str, default_port: int = 443) -> VCenterEndpoint:
    """Parse a vCenter server name or URL.

    Everything after the scheme up to the next '/' (or the end of the
    string) is the authority; user-info is dropped.

    Args:
        address: Server name or URL
        default_port: Port when the address carries none

    Returns:
        VCenterEndpoint with host and port

    Raises:
        ValueError: If no host can be extracted or the port is invalid
    """
    match = _AUTHORITY.match(address.strip())
    authority = match.group("authority") if match else ""
    if "@" in authority:
        authority = authority.rsplit("@", 1)[1]

    host, port_text = _split_authority(authority)
    if not host:
        raise ValueError(f"No host in vCenter address: {address!r}")

    if not port_text:
        return VCenterEndpoint(host=host, port=default_port)

    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"Invalid port in vCenter address: {address!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"Port out of range in vCenter address: {address!r}")
    return VCenterEndpoint(host=host, port=port)


def host_from_url(address: str) -> str:
    """Return only the host part of a vCenter server name or URL."""
    return parse_vcenter_address(address).host
