"""Remote PowerShell execution over an SSH session."""

import json
import logging
from typing import Any

import asyncssh

from console_actions.models import CallResult, CommandResult, FailureReason
from console_actions.utils.powershell import build_command_line, clean_error_stream

logger = logging.getLogger(__name__)

PRELUDE = (
    "$ErrorActionPreference = 'Stop'\n"
    "$ProgressPreference = 'SilentlyContinue'\n"
    "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8\n"
)


def _as_text(stream: str | bytes | None) -> str:
    """Normalize an asyncssh output stream to str."""
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream


async def run_powershell(
    conn: "asyncssh.SSHClientConnection",
    script: str,
    timeout: int,
) -> CommandResult:
    """Run a PowerShell script on the remote host.

    Args:
        conn: Open SSH connection to a Windows host
        script: Script body (the error-handling prelude is added)
        timeout: Seconds before the remote process is abandoned

    Returns:
        CommandResult with stdout, cleaned stderr and exit status

    Raises:
        asyncssh.Error: On channel failures
        TimeoutError: If the script runs longer than timeout
    """
    command = build_command_line(PRELUDE + script)
    result = await conn.run(command, check=False, timeout=timeout)

    returncode = result.returncode
    return CommandResult(
        output=_as_text(result.stdout),
        error=clean_error_stream(_as_text(result.stderr)),
        returncode=returncode if returncode is not None else -1,
    )


async def invoke_powershell(
    conn: "asyncssh.SSHClientConnection",
    script: str,
    timeout: int,
    description: str,
) -> CallResult[str]:
    """Run a script and convert the outcome into a CallResult.

    Args:
        conn: Open SSH connection
        script: Script body
        timeout: Timeout in seconds
        description: What the script does, used in failure messages

    Returns:
        CallResult with stdout on success, REJECTED failure otherwise
    """
    logger.debug("Running remote PowerShell: %s", description)
    try:
        result = await run_powershell(conn, script, timeout)
    except TimeoutError:
        logger.error("%s timed out after %ds", description, timeout)
        return CallResult.failed(
            FailureReason.REJECTED,
            f"{description} failed",
            f"timed out after {timeout}s",
        )
    except (asyncssh.Error, OSError) as e:
        logger.error("%s failed: %s", description, e)
        return CallResult.failed(FailureReason.REJECTED, f"{description} failed", str(e))

    if not result.ok:
        detail = result.error or result.output.strip() or f"exit status {result.returncode}"
        logger.error("%s failed (exit %d): %s", description, result.returncode, detail)
        return CallResult.failed(FailureReason.REJECTED, f"{description} failed", detail)

    return CallResult.success(result.output)


async def invoke_powershell_json(
    conn: "asyncssh.SSHClientConnection",
    script: str,
    timeout: int,
    description: str,
) -> CallResult[Any]:
    """Run a script whose output is a single JSON document.

    Empty output decodes to None.
    """
    ran = await invoke_powershell(conn, script, timeout, description)
    if not ran.ok:
        return ran

    output = (ran.value or "").strip()
    if not output:
        return CallResult.success(None)

    try:
        return CallResult.success(json.loads(output))
    except json.JSONDecodeError as e:
        logger.error("%s returned invalid JSON: %s", description, e)
        return CallResult.failed(
            FailureReason.REJECTED,
            f"{description} returned unreadable output",
            str(e),
        )


def as_list(value: Any) -> list[Any]:
    """Normalize ConvertTo-Json output, which collapses 1-item arrays."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]
