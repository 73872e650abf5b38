#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Android 驱动测试：用假的 uiautomator2 设备代替真实设备
"""
import shlex
import sys
from pathlib import Path
from types import ModuleType, SimpleNamespace

import pytest

from device_mcp.config import Config
from device_mcp.core.android_driver import CAMERA_DIR, REMOTE_RECORD_PATH, AndroidDriver, time_limit
from device_mcp.core.driver import ScreenRecordOptions
from device_mcp.errors import DriverError


class FakeU2Device:

    def __init__(self):
        self.shell_commands = []
        self.pushed = []
        self.pulled = []
        self.failing_commands = set()

    def shell(self, command):
        self.shell_commands.append(command)
        exit_code = 1 if any(command.startswith(c) for c in self.failing_commands) else 0
        return SimpleNamespace(output="error" if exit_code else "", exit_code=exit_code)

    def push(self, src, dst):
        self.pushed.append((src, dst))

    def pull(self, src, dst):
        self.pulled.append((src, dst))
        Path(dst).write_bytes(b"video")


class FakeProcess:

    def __init__(self, returncode=0):
        self.returncode = returncode

    def poll(self):
        return self.returncode


@pytest.fixture
def u2_device(monkeypatch):
    device = FakeU2Device()
    module = ModuleType("uiautomator2")
    module.connect = lambda serial: device
    monkeypatch.setitem(sys.modules, "uiautomator2", module)
    return device


@pytest.fixture
def started_commands(monkeypatch):
    commands = []

    def fake_start(command):
        commands.append(command)
        if "--record" in command:
            Path(command[command.index("--record") + 1]).write_bytes(b"video")
        return FakeProcess()

    monkeypatch.setattr(AndroidDriver, "_start", staticmethod(fake_start))
    return commands


class TestGallery:

    def test_push_image(self, u2_device, tmp_path):
        image = tmp_path / "a.png"
        image.write_bytes(b"png")

        AndroidDriver("emulator-5554").push_image(str(image))

        assert u2_device.pushed == [(str(image), f"{CAMERA_DIR}/a.png")]
        assert any("MEDIA_SCANNER_SCAN_FILE" in c and "a.png" in c for c in u2_device.shell_commands)

    def test_push_image_with_space_in_name(self, u2_device, tmp_path):
        image = tmp_path / "my photo.png"
        image.write_bytes(b"png")

        AndroidDriver("emulator-5554").push_image(str(image))

        scan = [c for c in u2_device.shell_commands if "MEDIA_SCANNER_SCAN_FILE" in c][0]
        assert shlex.split(scan)[-1] == f"file://{CAMERA_DIR}/my photo.png"

    def test_push_image_name_is_not_executed(self, u2_device, tmp_path):
        image = tmp_path / "a;reboot.png"
        image.write_bytes(b"png")

        AndroidDriver("emulator-5554").push_image(str(image))

        scan = [c for c in u2_device.shell_commands if "MEDIA_SCANNER_SCAN_FILE" in c][0]
        assert shlex.split(scan)[-1] == f"file://{CAMERA_DIR}/a;reboot.png"

    def test_push_missing_file(self, u2_device, tmp_path):
        with pytest.raises(DriverError):
            AndroidDriver("emulator-5554").push_image(str(tmp_path / "missing.png"))
        assert u2_device.pushed == []

    def test_clear_images(self, u2_device):
        AndroidDriver("emulator-5554").clear_images()
        assert u2_device.shell_commands[0] == f"rm -rf {CAMERA_DIR}/*"

    def test_shell_failure(self, u2_device):
        u2_device.failing_commands.add("rm -rf")
        with pytest.raises(DriverError):
            AndroidDriver("emulator-5554").clear_images()


class TestScreenRecord:

    def test_adb_record_is_capped(self, u2_device, started_commands, tmp_path, monkeypatch):
        monkeypatch.setattr(Config, "ADB_RECORD_LIMIT", 180)
        output = tmp_path / "out.mp4"

        path = AndroidDriver("emulator-5554", adb_path="adb").screen_record(
            ScreenRecordOptions(duration=600, path=str(output))
        )

        assert path == str(output)
        command = started_commands[0]
        assert command[:5] == ["adb", "-s", "emulator-5554", "shell", "screenrecord"]
        assert command[command.index("--time-limit") + 1] == "180"
        assert u2_device.pulled == [(REMOTE_RECORD_PATH, str(output))]

    def test_scrcpy_record(self, u2_device, started_commands, tmp_path, monkeypatch):
        monkeypatch.setattr(Config, "SCRCPY_PATH", "scrcpy")
        output = tmp_path / "out.mp4"

        AndroidDriver("emulator-5554").screen_record(
            ScreenRecordOptions(duration=300, path=str(output), with_scrcpy=True)
        )

        command = started_commands[0]
        assert command[0] == "scrcpy"
        assert "--no-audio" in command
        assert command[command.index("--time-limit") + 1] == "300"
        assert u2_device.pulled == []

    @pytest.mark.parametrize("with_scrcpy", [False, True])
    def test_fractional_duration_rounds_up(self, u2_device, started_commands, tmp_path, with_scrcpy):
        AndroidDriver("emulator-5554").screen_record(
            ScreenRecordOptions(duration=0.5, path=str(tmp_path / "out.mp4"), with_scrcpy=with_scrcpy)
        )

        command = started_commands[0]
        assert command[command.index("--time-limit") + 1] == "1"

    @pytest.mark.parametrize("duration, expected", [(0.2, 1), (1, 1), (2.1, 3), (30, 30)])
    def test_time_limit(self, duration, expected):
        assert time_limit(duration) == expected

    def test_scrcpy_with_audio(self, u2_device, started_commands, tmp_path):
        AndroidDriver("emulator-5554").screen_record(
            ScreenRecordOptions(path=str(tmp_path / "out.mp4"), with_audio=True)
        )

        command = started_commands[0]
        assert "--no-audio" not in command
        assert "--time-limit" not in command

    def test_default_path(self, u2_device, started_commands, tmp_path, monkeypatch):
        monkeypatch.setattr(Config, "SCREEN_RECORD_DIR", str(tmp_path))

        path = AndroidDriver("192.168.1.5:5555").screen_record(ScreenRecordOptions(duration=5))

        assert Path(path).parent == tmp_path
        assert Path(path).name.startswith("screenrecord_192.168.1.5_5555_")

    def test_adb_failure(self, u2_device, monkeypatch, tmp_path):
        monkeypatch.setattr(AndroidDriver, "_start", staticmethod(lambda command: FakeProcess(returncode=1)))

        with pytest.raises(DriverError):
            AndroidDriver("emulator-5554").screen_record(ScreenRecordOptions(path=str(tmp_path / "o.mp4")))
