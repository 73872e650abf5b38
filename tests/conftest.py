#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
测试公共夹具：假设备驱动和假设备管理器
"""
import os
from typing import List, Optional

import pytest

from device_mcp.core.driver import (
    DeviceDescriptor,
    DeviceList,
    DeviceManager,
    IDriver,
    Platform,
    ScreenRecordOptions,
)
from device_mcp.tools import build_tools

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 32


class FakeDriver(IDriver):
    """记录所有调用的假驱动"""

    def __init__(self, serial: str = "emulator-5554", platform: Platform = Platform.ANDROID):
        self._serial = serial
        self._platform = platform
        self.calls: List[tuple] = []
        self.push_error: Optional[Exception] = None
        self.clear_error: Optional[Exception] = None
        self.record_error: Optional[Exception] = None
        self.video_path = "/tmp/screenrecord.mp4"
        self.record_options: Optional[ScreenRecordOptions] = None
        # push 时文件是否存在
        self.pushed_file_existed: Optional[bool] = None

    @property
    def platform(self) -> Platform:
        return self._platform

    @property
    def uuid(self) -> str:
        return self._serial

    def push_image(self, image_path: str):
        self.calls.append(("push_image", image_path))
        self.pushed_file_existed = os.path.exists(image_path)
        if self.push_error:
            raise self.push_error

    def clear_images(self):
        self.calls.append(("clear_images",))
        if self.clear_error:
            raise self.clear_error

    def screen_record(self, options: ScreenRecordOptions) -> str:
        self.calls.append(("screen_record",))
        self.record_options = options
        if self.record_error:
            raise self.record_error
        return self.video_path


class FakeDeviceManager(DeviceManager):
    """返回固定设备的假设备管理器"""

    def __init__(self, driver: Optional[IDriver] = None, devices: Optional[DeviceList] = None):
        self.driver = driver or FakeDriver()
        self.devices = devices or DeviceList()
        self.select_calls: List[tuple] = []
        self.select_error: Optional[Exception] = None

    def list_devices(self) -> DeviceList:
        return self.devices

    def pair(self, device: DeviceDescriptor):
        pass

    def select_device(self, platform: Optional[str] = None, serial: Optional[str] = None) -> IDriver:
        self.select_calls.append((platform, serial))
        if self.select_error:
            raise self.select_error
        return self.driver


@pytest.fixture
def fake_driver():
    return FakeDriver()


@pytest.fixture
def fake_manager(fake_driver):
    return FakeDeviceManager(driver=fake_driver)


@pytest.fixture
def tools(fake_manager):
    return build_tools(fake_manager)
