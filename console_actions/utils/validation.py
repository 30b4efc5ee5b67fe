"""Argument validation utilities."""

# Characters that have no business in a computer or server name
_SUSPICIOUS_HOST_CHARS = ["/", "\\", ";", "&", "|", "$", "`", "'", '"', " ", "\n", "\r", "\x00"]


def validate_host(host: str) -> str:
    """Validate a computer or server name.

    Args:
        host: The host name to validate

    Returns:
        Validated host name (surrounding whitespace removed)

    Raises:
        ValueError: If host name is invalid
    """
    host = host.strip()
    if not host:
        raise ValueError("Host cannot be empty")

    if len(host) > 253:
        raise ValueError(f"Host name too long: {len(host)} chars")

    for char in _SUSPICIOUS_HOST_CHARS:
        if char in host:
            raise ValueError(f"Host contains invalid characters: {host!r}")

    return host


def validate_name(value: str, label: str) -> str:
    """Validate a free-text object name (VM, snapshot, application).

    Args:
        value: Name supplied by the console
        label: What the name refers to, used in error messages

    Returns:
        The name unchanged

    Raises:
        ValueError: If the name is empty or contains control characters
    """
    if not value.strip():
        raise ValueError(f"{label} cannot be empty")

    if any(char in value for char in ("\x00", "\n", "\r")):
        raise ValueError(f"{label} contains control characters: {value!r}")

    return value
