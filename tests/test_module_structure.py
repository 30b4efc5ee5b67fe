"""Tests for module structure.

These tests verify that the package layout is in place and the public
names import from their documented locations.
"""


class TestModelsModule:
    """Tests for console_actions.models package."""

    def test_import_ssh_host(self) -> None:
        """SSHHost can be imported from models."""
        from console_actions.models import SSHHost

        host = SSHHost(name="pc", hostname="pc.corp.example.com")
        assert host.user == "Administrator"  # default
        assert host.port == 22  # default

    def test_import_command_result(self) -> None:
        """CommandResult can be imported from models."""
        from console_actions.models import CommandResult

        result = CommandResult(output="hello", error="", returncode=0)
        assert result.ok

    def test_import_vsphere_models(self) -> None:
        """vCenter models can be imported from models."""
        from console_actions.models import SnapshotRequest, VCenterEndpoint

        assert VCenterEndpoint("vc").port == 443
        request = SnapshotRequest("s", "d")
        assert (request.memory, request.quiesce) == (False, False)


class TestServicesModule:
    """Tests for console_actions.services package."""

    def test_import_connectors(self) -> None:
        """Connectors can be imported from services."""
        from console_actions.services import SSHConnector, VCenterConnector

        assert SSHConnector is not None
        assert VCenterConnector is not None

    def test_import_operations(self) -> None:
        """Remote operations can be imported from services."""
        from console_actions.services import (
            collect_timeline,
            create_snapshot,
            remove_application_server,
            run_powershell,
        )

        assert callable(collect_timeline)
        assert callable(create_snapshot)
        assert callable(remove_application_server)
        assert callable(run_powershell)


class TestUtilsModule:
    """Tests for console_actions.utils package."""

    def test_import_helpers(self) -> None:
        """Helpers can be imported from utils."""
        from console_actions.utils import (
            ColorfulFormatter,
            parse_vcenter_address,
            quote_literal,
            validate_host,
        )

        assert callable(parse_vcenter_address)
        assert callable(quote_literal)
        assert callable(validate_host)
        assert ColorfulFormatter is not None


class TestActionsModule:
    """Tests for console_actions.actions package."""

    def test_entry_points_exist(self) -> None:
        """Each action exposes a console-script entry point."""
        from console_actions.actions.citrix import remove_app_server_main
        from console_actions.actions.logon import logon_duration_main
        from console_actions.actions.vmware import (
            create_snapshot_main,
            remove_snapshot_main,
            restart_guest_main,
        )

        for entry in (
            restart_guest_main,
            create_snapshot_main,
            remove_snapshot_main,
            remove_app_server_main,
            logon_duration_main,
        ):
            assert callable(entry)
            assert entry.__doc__
