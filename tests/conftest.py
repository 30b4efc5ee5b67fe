"""Shared fixtures for console action tests."""

import base64
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from console_actions.config import Config, HostKeyVerifier, Settings, SSHConfigParser
from console_actions.dependencies import Dependencies
from console_actions.models import CallResult
from console_actions.services.connection import SSHConnector
from console_actions.services.vsphere import VCenterConnector


def _decode_script(command: str) -> str:
    """Recover the script text from a powershell.exe -EncodedCommand line."""
    encoded = command.rsplit(" ", 1)[1]
    return base64.b64decode(encoded).decode("utf-16-le")


def _ps_result(stdout: str = "", stderr: str = "", returncode: int = 0) -> MagicMock:
    """Fake asyncssh completed process."""
    return MagicMock(stdout=stdout, stderr=stderr, returncode=returncode)


@pytest.fixture
def settings() -> Settings:
    """Settings with test credentials."""
    return Settings(
        windows_user="svc-console",
        vcenter_user="administrator@vsphere.local",
        vcenter_password="secret",
    )


@pytest.fixture
def ssh_config_path(tmp_path: Path) -> Path:
    """SSH config with one Citrix farm server alias."""
    config = tmp_path / "ssh_config"
    config.write_text("""
Host farm01
    HostName xa-farm01.corp.example.com
    User CORP\\svc-xenapp
    Port 2222
""")
    return config


@pytest.fixture
def config(settings: Settings, ssh_config_path: Path) -> Config:
    """Config without host key verification."""
    return Config(
        settings=settings,
        parser=SSHConfigParser(ssh_config_path, default_user=settings.windows_user),
        host_keys=HostKeyVerifier(known_hosts_path="none"),
    )


@pytest.fixture
def ssh_conn() -> AsyncMock:
    """Mock SSH connection to a Windows host."""
    return AsyncMock()


@pytest.fixture
def service_instance() -> MagicMock:
    """Mock vCenter service instance."""
    return MagicMock()


@pytest.fixture
def deps(config: Config, ssh_conn: AsyncMock, service_instance: MagicMock) -> Dependencies:
    """Dependencies with mocked vCenter and SSH connectors."""
    vcenter = MagicMock(spec=VCenterConnector)
    vcenter.connect.return_value = CallResult.success(service_instance)

    ssh = MagicMock(spec=SSHConnector)
    ssh.connect = AsyncMock(return_value=CallResult.success(ssh_conn))
    ssh.close = AsyncMock()

    return Dependencies(config=config, vcenter=vcenter, ssh=ssh)


def _make_vm(name: str, snapshots: list[MagicMock] | None = None, guest_state: str = "running") -> MagicMock:
    """Mock virtual machine with an optional snapshot tree."""
    vm = MagicMock()
    vm.name = name
    vm.guest.guestState = guest_state
    if snapshots is None:
        vm.snapshot = None
    else:
        vm.snapshot.rootSnapshotList = snapshots
    return vm


def _make_snapshot(name: str, children: list[MagicMock] | None = None) -> MagicMock:
    """Mock snapshot tree node."""
    node = MagicMock()
    node.name = name
    node.childSnapshotList = children or []
    return node


def _attach_vms(service_instance: MagicMock, *vms: MagicMock) -> MagicMock:
    """Make vms visible through the service instance's container view."""
    content = service_instance.RetrieveContent.return_value
    container = content.viewManager.CreateContainerView.return_value
    container.view = list(vms)
    return container


@pytest.fixture
def decode_script():
    """Decoder for encoded PowerShell command lines."""
    return _decode_script


@pytest.fixture
def ps_result():
    """Factory for fake completed processes."""
    return _ps_result


@pytest.fixture
def make_vm():
    """Factory for mock virtual machines."""
    return _make_vm


@pytest.fixture
def make_snapshot():
    """Factory for mock snapshot nodes."""
    return _make_snapshot


@pytest.fixture
def attach_vms():
    """Helper registering mock VMs on a service instance."""
    return _attach_vms
