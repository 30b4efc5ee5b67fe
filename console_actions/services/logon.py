"""Logon duration diagnostics.

A single PowerShell script gathers the raw records on the target
computer (WMI logon session, profile and group policy events, shell
process creation times); the mapping into phases happens here.
"""

import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING, Any

from console_actions.models import (
    CallResult,
    FailureReason,
    LogonPhase,
    LogonRecord,
    LogonTimeline,
)
from console_actions.services.powershell import as_list, invoke_powershell_json
from console_actions.utils.powershell import quote_literal

if TYPE_CHECKING:
    import asyncssh

logger = logging.getLogger(__name__)

PROFILE_LOG = "Microsoft-Windows-User Profile Service/Operational"
GROUP_POLICY_LOG = "Microsoft-Windows-GroupPolicy/Operational"
PROCESS_SOURCE = "process"

PROFILE_START, PROFILE_END = 1, 2
GROUP_POLICY_START, GROUP_POLICY_END = 4001, 8001

USERINIT = "userinit.exe"
EXPLORER = "explorer.exe"

PHASE_PROFILE = "User Profile"
PHASE_GROUP_POLICY = "Group Policy"
PHASE_SHELL = "Shell Start"
PHASE_TOTAL = "Total Logon"

_COLLECT_TEMPLATE = r"""
$fmt = 'yyyy-MM-ddTHH:mm:ss.fffffffzzz'
$user = __USER__
$domain = __DOMAIN__
$sessions = Get-CimInstance -ClassName Win32_LogonSession -Filter 'LogonType = 2 OR LogonType = 10 OR LogonType = 11'
$found = foreach ($s in $sessions) {
    $acct = Get-CimAssociatedInstance -InputObject $s -Association Win32_LoggedOnUser -ErrorAction SilentlyContinue | Select-Object -First 1
    if ($acct -and $acct.Name -eq $user -and (-not $domain -or $acct.Domain -eq $domain)) {
        [pscustomobject]@{ Session = $s; Account = $acct }
    }
}
$latest = $found | Sort-Object { $_.Session.StartTime } -Descending | Select-Object -First 1
if (-not $latest) { '{"session":null,"records":[]}'; exit 0 }
$start = $latest.Session.StartTime
$until = $start.AddMinutes(__WINDOW__)
$account = '{0}\{1}' -f $latest.Account.Domain, $latest.Account.Name
$sid = $latest.Account.SID
$records = @()
$profileEvents = Get-WinEvent -FilterHashtable @{ LogName = '__PROFILE_LOG__'; Id = 1, 2; StartTime = $start.AddSeconds(-5); EndTime = $until } -ErrorAction SilentlyContinue
foreach ($e in @($profileEvents | Where-Object { $_.UserId -and $_.UserId.Value -eq $sid })) {
    $records += @{ source = $e.LogName; id = $e.Id; time = $e.TimeCreated.ToString($fmt); name = '' }
}
$policyEvents = Get-WinEvent -FilterHashtable @{ LogName = '__GROUP_POLICY_LOG__'; Id = 4001, 8001; StartTime = $start.AddSeconds(-5); EndTime = $until } -ErrorAction SilentlyContinue
foreach ($e in @($policyEvents | Where-Object { $_.Message -like "*$account*" })) {
    $records += @{ source = $e.LogName; id = $e.Id; time = $e.TimeCreated.ToString($fmt); name = '' }
}
$procs = Get-CimInstance -ClassName Win32_Process -Filter "Name = 'userinit.exe' OR Name = 'explorer.exe'"
foreach ($p in @($procs)) {
    $owner = Invoke-CimMethod -InputObject $p -MethodName GetOwner -ErrorAction SilentlyContinue
    if ($owner -and $owner.User -eq $latest.Account.Name -and $p.CreationDate -ge $start -and $p.CreationDate -le $until) {
        $records += @{ source = 'process'; id = 0; time = $p.CreationDate.ToString($fmt); name = $p.Name.ToLower() }
    }
}
@{ session = @{ start = $start.ToString($fmt); account = $account }; records = $records } | ConvertTo-Json -Depth 4 -Compress
"""

_FRACTION = re.compile(r"(\.\d{6})\d+")


def collection_script(user: str, domain: str, window_minutes: int) -> str:
    """Build the record collection script for one user."""
    return (
        _COLLECT_TEMPLATE.replace("__USER__", quote_literal(user))
        .replace("__DOMAIN__", quote_literal(domain))
        .replace("__WINDOW__", str(int(window_minutes)))
        .replace("__PROFILE_LOG__", PROFILE_LOG)
        .replace("__GROUP_POLICY_LOG__", GROUP_POLICY_LOG)
    )


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp written by the collection script.

    .NET emits seven fractional digits; datetime keeps six.

    Raises:
        ValueError: If value is not an ISO-8601 timestamp
    """
    text = _FRACTION.sub(r"\1", value.strip())
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def parse_records(raw: list[dict[str, Any]]) -> list[LogonRecord]:
    """Convert collected records into LogonRecords sorted by time.

    Records with an unreadable timestamp are skipped with a warning.
    """
    records = []
    for item in raw:
        try:
            time = parse_timestamp(str(item.get("time", "")))
        except ValueError:
            logger.warning("Skipping record with bad timestamp: %r", item)
            continue
        records.append(
            LogonRecord(
                source=str(item.get("source", "")),
                event_id=int(item.get("id") or 0),
                time=time,
                name=str(item.get("name") or ""),
            )
        )
    return sorted(records, key=lambda record: record.time)


def _first(
    records: list[LogonRecord],
    source: str,
    event_id: int = 0,
    name: str = "",
    after: datetime | None = None,
) -> datetime | None:
    """Time of the first matching record at or after `after`."""
    for record in records:
        if record.source != source or record.event_id != event_id:
            continue
        if name and record.name != name:
            continue
        if after is not None and record.time < after:
            continue
        return record.time
    return None


def _bounded_phase(
    name: str,
    records: list[LogonRecord],
    source: str,
    start_id: int,
    end_id: int,
) -> LogonPhase:
    start = _first(records, source, start_id)
    end = _first(records, source, end_id, after=start) if start else None
    return LogonPhase(name=name, start=start, end=end)


def build_timeline(
    computer: str,
    user: str,
    session_start: datetime,
    records: list[LogonRecord],
) -> LogonTimeline:
    """Map logon records into the phase timeline.

    Phases:
        User Profile: profile service event 1 -> 2
        Group Policy: group policy event 4001 -> 8001
        Shell Start: userinit.exe (or the last preceding phase end) -> explorer.exe
        Total Logon: session start -> explorer.exe

    A phase whose boundaries are missing stays in the timeline with the
    missing side set to None.
    """
    profile = _bounded_phase(PHASE_PROFILE, records, PROFILE_LOG, PROFILE_START, PROFILE_END)
    group_policy = _bounded_phase(
        PHASE_GROUP_POLICY, records, GROUP_POLICY_LOG, GROUP_POLICY_START, GROUP_POLICY_END
    )

    explorer = _first(records, PROCESS_SOURCE, name=EXPLORER, after=session_start)
    shell_start = _first(records, PROCESS_SOURCE, name=USERINIT, after=session_start)
    if shell_start is None:
        ends = [end for end in (profile.end, group_policy.end) if end is not None]
        shell_start = max(ends) if ends else None
    shell_end = explorer
    if shell_start is not None and explorer is not None and explorer < shell_start:
        shell_end = None

    phases = [
        profile,
        group_policy,
        LogonPhase(name=PHASE_SHELL, start=shell_start, end=shell_end),
        LogonPhase(name=PHASE_TOTAL, start=session_start, end=explorer),
    ]
    return LogonTimeline(
        computer=computer,
        user=user,
        session_start=session_start,
        phases=phases,
    )


def _clock(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%H:%M:%S.%f")[:-3]


def format_timeline(timeline: LogonTimeline) -> str:
    """Render a timeline as a readable table."""
    lines = [
        f"Logon duration for {timeline.user} on {timeline.computer} "
        f"(session started {timeline.session_start:%Y-%m-%d %H:%M:%S})",
        "",
        f"{'Phase':<14} {'Start':<12} {'End':<12} Duration",
        f"{'-' * 14} {'-' * 12} {'-' * 12} {'-' * 10}",
    ]
    for phase in timeline.phases:
        duration = phase.duration
        duration_text = f"{duration:.3f}s" if duration is not None else "incomplete"
        lines.append(
            f"{phase.name:<14} {_clock(phase.start):<12} {_clock(phase.end):<12} {duration_text}"
        )
    return "\n".join(lines)


async def collect_timeline(
    conn: "asyncssh.SSHClientConnection",
    computer: str,
    user: str,
    domain: str,
    window_minutes: int,
    timeout: int,
) -> CallResult[LogonTimeline]:
    """Gather logon records on computer and build the timeline.

    Returns:
        CallResult with the timeline, NOT_FOUND if the user has no
        interactive session
    """
    label = f"{domain}\\{user}" if domain else user
    collected = await invoke_powershell_json(
        conn,
        collection_script(user, domain, window_minutes),
        timeout,
        f"Collecting logon records for {label}",
    )
    if not collected.ok:
        return CallResult(failure=collected.failure)

    payload = collected.value or {}
    session = payload.get("session")
    if not session:
        return CallResult.failed(
            FailureReason.NOT_FOUND,
            f"No interactive logon session for {label} on {computer}",
        )

    try:
        session_start = parse_timestamp(str(session.get("start", "")))
    except ValueError as e:
        return CallResult.failed(
            FailureReason.REJECTED,
            f"Unreadable session start for {label} on {computer}",
            str(e),
        )

    records = parse_records(as_list(payload.get("records")))
    logger.info("Collected %d logon record(s) for %s on %s", len(records), label, computer)
    account = str(session.get("account") or label)
    return CallResult.success(build_timeline(computer, account, session_start, records))
