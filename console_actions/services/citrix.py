"""Citrix XenApp farm operations through remote PowerShell.

The XenApp cmdlets ship either as a registered snap-in or as a module
depending on the SDK installed on the farm server. Providers are probed
in a fixed order and the first available one supplies the statement
that loads the cmdlets into each script.
"""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from console_actions.models import (
    CallResult,
    CapabilityProvider,
    FailureReason,
    ProviderKind,
    ProviderProbe,
)
from console_actions.services.powershell import (
    as_list,
    invoke_powershell,
    invoke_powershell_json,
)
from console_actions.utils.powershell import quote_literal

if TYPE_CHECKING:
    import asyncssh

logger = logging.getLogger(__name__)

XENAPP_PROVIDERS: tuple[CapabilityProvider, ...] = (
    CapabilityProvider("Citrix.XenApp.Commands", ProviderKind.SNAPIN),
    CapabilityProvider("Citrix.XenApp.Commands", ProviderKind.MODULE),
)

_AVAILABLE = "available"


def probe_script(provider: CapabilityProvider) -> str:
    """Script printing 'available' when provider can be loaded."""
    name = quote_literal(provider.name)
    if provider.kind is ProviderKind.SNAPIN:
        check = f"Get-PSSnapin -Registered -Name {name} -ErrorAction SilentlyContinue"
    else:
        check = f"Get-Module -ListAvailable -Name {name} -ErrorAction SilentlyContinue"
    return f"if ({check}) {{ '{_AVAILABLE}' }} else {{ 'missing' }}\n"


def load_statement(provider: CapabilityProvider) -> str:
    """Statement that loads provider into the current session."""
    name = quote_literal(provider.name)
    if provider.kind is ProviderKind.SNAPIN:
        return f"Add-PSSnapin -Name {name}\n"
    return f"Import-Module -Name {name}\n"


async def probe_provider(
    conn: "asyncssh.SSHClientConnection",
    provider: CapabilityProvider,
    timeout: int,
) -> ProviderProbe:
    """Check whether one provider is installed on the farm server."""
    ran = await invoke_powershell(
        conn, probe_script(provider), timeout, f"Probe for {provider.label}"
    )
    if not ran.ok:
        return ProviderProbe(provider, available=False, detail=str(ran.failure))

    available = (ran.value or "").strip().lower() == _AVAILABLE
    logger.debug("Probe %s: %s", provider.label, "available" if available else "missing")
    return ProviderProbe(
        provider,
        available=available,
        detail="" if available else "not installed",
    )


async def select_provider(
    conn: "asyncssh.SSHClientConnection",
    providers: Sequence[CapabilityProvider],
    timeout: int,
) -> CallResult[CapabilityProvider]:
    """Probe providers in order and return the first available one.

    Returns:
        CallResult with the provider, PRECONDITION failure listing every
        probe result when none is available
    """
    probes: list[ProviderProbe] = []
    for provider in providers:
        probe = await probe_provider(conn, provider, timeout)
        probes.append(probe)
        if probe.available:
            logger.info("Using %s", provider.label)
            return CallResult.success(provider)

    detail = "; ".join(f"{p.provider.label}: {p.detail}" for p in probes)
    return CallResult.failed(
        FailureReason.PRECONDITION,
        "XenApp PowerShell cmdlets are not available",
        detail or "no providers configured",
    )


async def get_application_servers(
    conn: "asyncssh.SSHClientConnection",
    provider: CapabilityProvider,
    application: str,
    timeout: int,
) -> CallResult[list[str]]:
    """Read the servers publishing an application.

    Args:
        conn: SSH connection to a farm server
        provider: Loaded capability provider
        application: Published application browser name
        timeout: Timeout in seconds

    Returns:
        CallResult with server names, NOT_FOUND if the application is unknown
    """
    app = quote_literal(application)
    script = (
        load_statement(provider)
        + f"$app = Get-XAApplication -BrowserName {app} -ErrorAction SilentlyContinue\n"
        + "if (-not $app) { '{\"found\":false,\"servers\":[]}'; exit 0 }\n"
        + f"$servers = @(Get-XAServer -BrowserName {app} | ForEach-Object {{ $_.ServerName }})\n"
        + "@{ found = $true; servers = $servers } | ConvertTo-Json -Compress\n"
    )
    listed = await invoke_powershell_json(
        conn, script, timeout, f"Listing servers of application '{application}'"
    )
    if not listed.ok:
        return CallResult(failure=listed.failure)

    payload = listed.value or {}
    if not payload.get("found"):
        return CallResult.failed(
            FailureReason.NOT_FOUND,
            f"Published application '{application}' not found",
        )
    servers = [str(name) for name in as_list(payload.get("servers"))]
    logger.debug("Application '%s' published on %d server(s)", application, len(servers))
    return CallResult.success(servers)


async def remove_application_server(
    conn: "asyncssh.SSHClientConnection",
    provider: CapabilityProvider,
    application: str,
    server: str,
    timeout: int,
) -> CallResult[None]:
    """Remove server from the application's server list."""
    script = (
        load_statement(provider)
        + f"Remove-XAApplicationServer -BrowserName {quote_literal(application)} "
        + f"-ServerNames {quote_literal(server)}\n"
    )
    logger.info("Removing server '%s' from application '%s'", server, application)
    removed = await invoke_powershell(
        conn, script, timeout, f"Removing server '{server}' from '{application}'"
    )
    if not removed.ok:
        return CallResult(failure=removed.failure)
    return CallResult.success(None)
