"""Tests for logon record parsing and phase mapping."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from console_actions.models import FailureReason, LogonRecord
from console_actions.services import logon

TZ = timezone(timedelta(hours=1))
START = datetime(2024, 3, 5, 8, 0, 0, tzinfo=TZ)


def _at(seconds: float) -> datetime:
    return START + timedelta(seconds=seconds)


def _profile(event_id: int, seconds: float) -> LogonRecord:
    return LogonRecord(logon.PROFILE_LOG, event_id, _at(seconds))


def _policy(event_id: int, seconds: float) -> LogonRecord:
    return LogonRecord(logon.GROUP_POLICY_LOG, event_id, _at(seconds))


def _process(name: str, seconds: float) -> LogonRecord:
    return LogonRecord(logon.PROCESS_SOURCE, 0, _at(seconds), name)


class TestParseTimestamp:
    """Tests for parse_timestamp()."""

    def test_seven_digit_fraction(self) -> None:
        """.NET ticks are truncated to microseconds."""
        parsed = logon.parse_timestamp("2024-03-05T08:00:01.1234567+01:00")

        assert parsed == START + timedelta(seconds=1, microseconds=123456)

    def test_zulu_suffix(self) -> None:
        """A trailing Z means UTC."""
        parsed = logon.parse_timestamp("2024-03-05T07:00:00Z")

        assert parsed == START

    def test_garbage(self) -> None:
        """Unreadable text raises ValueError."""
        with pytest.raises(ValueError):
            logon.parse_timestamp("yesterday")


def test_parse_records_sorts_and_skips_bad() -> None:
    """Records are ordered by time; bad timestamps are dropped."""
    records = logon.parse_records(
        [
            {"source": "process", "id": 0, "time": "2024-03-05T08:00:09.0000000+01:00", "name": "explorer.exe"},
            {"source": logon.PROFILE_LOG, "id": 1, "time": "2024-03-05T08:00:01.0000000+01:00", "name": ""},
            {"source": logon.PROFILE_LOG, "id": 2, "time": "not a time"},
        ]
    )

    assert [record.event_id for record in records] == [1, 0]
    assert records[1].name == "explorer.exe"


class TestBuildTimeline:
    """Tests for build_timeline()."""

    def test_complete_logon(self) -> None:
        """Every phase is bounded when all records are present."""
        records = [
            _profile(1, 1), _profile(2, 3),
            _policy(4001, 3.5), _policy(8001, 7),
            _process(logon.USERINIT, 7.5), _process(logon.EXPLORER, 9),
        ]

        timeline = logon.build_timeline("PC-0042", "CORP\\jdoe", START, records)

        assert [phase.name for phase in timeline.phases] == [
            logon.PHASE_PROFILE, logon.PHASE_GROUP_POLICY, logon.PHASE_SHELL, logon.PHASE_TOTAL,
        ]
        assert timeline.phase(logon.PHASE_PROFILE).duration == 2
        assert timeline.phase(logon.PHASE_GROUP_POLICY).duration == 3.5
        assert timeline.phase(logon.PHASE_SHELL).duration == 1.5
        assert timeline.phase(logon.PHASE_TOTAL).duration == 9

    def test_shell_start_falls_back_to_last_phase_end(self) -> None:
        """Without userinit the shell phase starts at the last known phase end."""
        records = [_profile(1, 1), _profile(2, 3), _policy(4001, 3.5), _policy(8001, 7), _process(logon.EXPLORER, 8)]

        timeline = logon.build_timeline("PC-0042", "jdoe", START, records)

        assert timeline.phase(logon.PHASE_SHELL).start == _at(7)
        assert timeline.phase(logon.PHASE_SHELL).duration == 1

    def test_missing_end_leaves_phase_incomplete(self) -> None:
        """A phase without its end event stays in the timeline, incomplete."""
        records = [_profile(1, 1), _policy(4001, 3.5)]

        timeline = logon.build_timeline("PC-0042", "jdoe", START, records)

        assert timeline.phase(logon.PHASE_PROFILE).end is None
        assert timeline.phase(logon.PHASE_GROUP_POLICY).end is None
        assert timeline.phase(logon.PHASE_SHELL).start is None
        assert timeline.phase(logon.PHASE_TOTAL).end is None
        assert timeline.phase(logon.PHASE_TOTAL).duration is None

    def test_end_before_start_ignored(self) -> None:
        """An end event preceding its start does not close the phase."""
        records = [_profile(2, 0.5), _profile(1, 1)]

        timeline = logon.build_timeline("PC-0042", "jdoe", START, records)

        assert timeline.phase(logon.PHASE_PROFILE).end is None

    def test_explorer_before_userinit(self) -> None:
        """A shell already running when userinit starts leaves Shell Start open."""
        records = [_process(logon.EXPLORER, 2), _process(logon.USERINIT, 5)]

        timeline = logon.build_timeline("PC-0042", "jdoe", START, records)

        assert timeline.phase(logon.PHASE_SHELL).end is None
        assert timeline.phase(logon.PHASE_TOTAL).end == _at(2)


def test_format_timeline() -> None:
    """The table lists every phase, marking incomplete ones."""
    records = [_profile(1, 1), _profile(2, 3.25)]
    timeline = logon.build_timeline("PC-0042", "CORP\\jdoe", START, records)

    text = logon.format_timeline(timeline)

    assert text.startswith("Logon duration for CORP\\jdoe on PC-0042 (session started 2024-03-05 08:00:00)")
    assert "User Profile   08:00:01.000 08:00:03.250 2.250s" in text
    assert "Total Logon" in text
    assert text.count("incomplete") == 3


def test_collection_script_quotes_user() -> None:
    """User and domain are embedded as literals with the window."""
    script = logon.collection_script("o'neil", "CORP", 45)

    assert "$user = 'o''neil'" in script
    assert "$domain = 'CORP'" in script
    assert "$start.AddMinutes(45)" in script
    assert logon.PROFILE_LOG in script
    assert "__" not in script


class TestCollectTimeline:
    """Tests for collect_timeline()."""

    @pytest.mark.asyncio
    async def test_collects(self, ssh_conn, ps_result) -> None:
        """The payload becomes a timeline named after the resolved account."""
        payload = {
            "session": {"start": "2024-03-05T08:00:00.0000000+01:00", "account": "CORP\\jdoe"},
            "records": {"source": "process", "id": 0, "time": "2024-03-05T08:00:12.5000000+01:00", "name": "explorer.exe"},
        }
        ssh_conn.run.return_value = ps_result(stdout=json.dumps(payload))

        result = await logon.collect_timeline(ssh_conn, "PC-0042", "jdoe", "", 60, 120)

        timeline = result.unwrap()
        assert timeline.user == "CORP\\jdoe"
        assert timeline.session_start == START
        assert timeline.phase(logon.PHASE_TOTAL).duration == 12.5

    @pytest.mark.asyncio
    async def test_no_session(self, ssh_conn, ps_result) -> None:
        """Users without an interactive session are NOT_FOUND."""
        ssh_conn.run.return_value = ps_result(stdout='{"session":null,"records":[]}')

        result = await logon.collect_timeline(ssh_conn, "PC-0042", "jdoe", "CORP", 60, 120)

        assert result.failure.reason is FailureReason.NOT_FOUND
        assert "CORP\\jdoe" in result.failure.message

    @pytest.mark.asyncio
    async def test_remote_error(self, ssh_conn, ps_result) -> None:
        """Script failures propagate as REJECTED."""
        ssh_conn.run.return_value = ps_result(stderr="Get-CimInstance : Access denied", returncode=1)

        result = await logon.collect_timeline(ssh_conn, "PC-0042", "jdoe", "", 60, 120)

        assert result.failure.reason is FailureReason.REJECTED
        assert "Access denied" in str(result.failure)
