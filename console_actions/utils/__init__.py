"""Utilities for console actions."""

from console_actions.utils.console import ColorfulFormatter
from console_actions.utils.powershell import (
    build_command_line,
    clean_error_stream,
    encode_command,
    quote_literal,
)
from console_actions.utils.url import host_from_url, parse_vcenter_address
from console_actions.utils.validation import validate_host, validate_name

__all__ = [
    "build_command_line",
    "clean_error_stream",
    "ColorfulFormatter",
    "encode_command",
    "host_from_url",
    "parse_vcenter_address",
    "quote_literal",
    "validate_host",
    "validate_name",
]
