"""
Tests for nova_installer.services and nova_installer.lib.systemd.
"""

import pytest

from conftest import FakeCommands, FakeServices
from nova_installer.errors import ServiceManagerError, UnitNotFoundError
from nova_installer.lib.command import CmdResult
from nova_installer.lib.systemd import NOT_FOUND, SystemdServiceManager
from nova_installer.services import ensure_disabled, ensure_enabled


def _systemctl(tmp_path, stdout="", returncode=0, stderr="", scope_args=()):
    argv = ("systemctl", *scope_args, "is-enabled")
    return FakeCommands(tmp_path, {argv: CmdResult(list(argv), returncode, stdout, stderr)})


class TestSystemdServiceManager:
    def test_reads_state(self, tmp_path):
        svc = SystemdServiceManager(_systemctl(tmp_path, "enabled\n"))
        assert svc.state("gdm.service") == "enabled"

    def test_disabled_exit_status_is_not_an_error(self, tmp_path):
        svc = SystemdServiceManager(_systemctl(tmp_path, "disabled\n", returncode=1))
        assert svc.state("fstrim.timer") == "disabled"

    def test_missing_unit_old_systemd_message(self, tmp_path):
        cmds = _systemctl(
            tmp_path,
            returncode=1,
            stderr="Failed to get unit file state for nope.service: No such file or directory",
        )
        assert SystemdServiceManager(cmds).state("nope.service") == NOT_FOUND

    def test_missing_systemctl(self, tmp_path):
        cmds = _systemctl(tmp_path, returncode=127, stderr="[Errno 2] No such file or directory: 'systemctl'")
        with pytest.raises(ServiceManagerError):
            SystemdServiceManager(cmds).state("gdm.service")

    def test_bus_unreachable(self, tmp_path):
        cmds = _systemctl(tmp_path, returncode=1, stderr="Failed to connect to bus: No such file or directory")
        with pytest.raises(ServiceManagerError):
            SystemdServiceManager(cmds).state("gdm.service")

    def test_global_scope(self, tmp_path):
        cmds = _systemctl(tmp_path, "enabled\n", scope_args=("--global",))
        svc = SystemdServiceManager(cmds)

        assert svc.state("pipewire.service", scope="global") == "enabled"
        svc.enable("wireplumber.service", scope="global")
        assert cmds.calls[-1] == ["systemctl", "--global", "enable", "wireplumber.service"]


class TestReconciler:
    def test_enable_when_disabled(self):
        services = FakeServices()

        assert ensure_enabled(services, "gdm.service") is True
        assert services.calls == [("enable", "gdm.service", "system")]

    @pytest.mark.parametrize("state", ["enabled", "static", "indirect", "alias"])
    def test_enable_is_noop_when_already_satisfied(self, state):
        services = FakeServices({("gdm.service", "system"): state})

        assert ensure_enabled(services, "gdm.service") is False
        assert services.calls == []

    def test_enable_missing_unit_is_an_error(self):
        services = FakeServices(default=NOT_FOUND)
        with pytest.raises(UnitNotFoundError):
            ensure_enabled(services, "gdm.service")

    def test_masked_unit_left_alone(self):
        services = FakeServices({("zramswap.service", "system"): "masked"})
        assert ensure_enabled(services, "zramswap.service") is False
        assert services.calls == []

    def test_disable_absent_unit_is_noop(self):
        services = FakeServices(default=NOT_FOUND)

        assert ensure_disabled(services, "pulseaudio.service", scope="global") is False
        assert services.calls == []

    def test_disable_enabled_unit(self):
        services = FakeServices({("pulseaudio.socket", "global"): "enabled"})

        assert ensure_disabled(services, "pulseaudio.socket", scope="global") is True
        assert services.calls == [("disable", "pulseaudio.socket", "global")]

    def test_second_call_changes_nothing(self):
        services = FakeServices()
        ensure_enabled(services, "fstrim.timer")
        ensure_enabled(services, "fstrim.timer")

        assert services.calls == [("enable", "fstrim.timer", "system")]

    @pytest.mark.parametrize("state", ["linked", "linked-runtime"])
    def test_linked_unit_still_enabled(self, state):
        services = FakeServices({("fwupd-refresh.timer", "system"): state})

        assert ensure_enabled(services, "fwupd-refresh.timer") is True
        assert services.calls == [("enable", "fwupd-refresh.timer", "system")]
