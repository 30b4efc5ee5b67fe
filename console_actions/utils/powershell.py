"""PowerShell command safety utilities."""

import base64
import re
import xml.etree.ElementTree as ET

POWERSHELL_EXE = "powershell.exe"

# PowerShell also treats typographic single quotes as quote characters
_SINGLE_QUOTES = re.compile("(['‘’‚‛])")

_CLIXML_HEADER = "#< CLIXML"


def quote_literal(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal.

    Args:
        value: Raw value supplied by the console

    Returns:
        Literal safe to embed in a script
    """
    return "'" + _SINGLE_QUOTES.sub(r"\1\1", value) + "'"


def encode_command(script: str) -> str:
    """Encode a script for -EncodedCommand (base64 of UTF-16LE)."""
    return base64.b64encode(script.encode("utf-16-le")).decode("ascii")


def build_command_line(script: str) -> str:
    """Build the command line that runs script non-interactively.

    Args:
        script: PowerShell script text

    Returns:
        Command line for the remote shell
    """
    return (
        f"{POWERSHELL_EXE} -NoLogo -NoProfile -NonInteractive "
        f"-ExecutionPolicy Bypass -EncodedCommand {encode_command(script)}"
    )


def clean_error_stream(stderr: str) -> str:
    """Reduce a CLIXML error stream to the plain error text.

    PowerShell serializes its error records as CLIXML when its output is
    redirected; anything else is returned stripped.
    """
    text = stderr.strip()
    if not text.startswith(_CLIXML_HEADER):
        return text

    body = text[len(_CLIXML_HEADER):].strip()
    try:
        root = ET.fromstring(body)
    except ET.ParseError:
        return text

    lines = []
    for node in root.iter():
        if node.tag.endswith("}S") or node.tag == "S":
            if node.attrib.get("S") == "Error" and node.text:
                lines.append(node.text.replace("_x000D__x000A_", "\n"))
    return "".join(lines).strip() or text
