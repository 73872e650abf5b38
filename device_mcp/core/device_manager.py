#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
设备连接管理 - Android (adb) + iOS (tidevice)

功能：
1. 列出所有连接的设备（iOS 设备会先完成配对）
2. 配对 iOS 设备（带重试与退避）
3. 按平台 + 序列号选择设备，返回驱动句柄
"""
import os
import subprocess
import time
from pathlib import Path
from typing import Callable, List, Optional

from ..config import Config
from ..errors import DeviceNotFoundError, DriverError
from ..utils.logger import get_logger
from .android_driver import AndroidDriver
from .driver import DeviceDescriptor, DeviceList, DeviceManager, IDriver, Platform
from .ios_driver import IOSDriver, require_tidevice

logger = get_logger('device_manager')


def find_adb() -> str:
    """
    查找ADB路径

    Returns:
        ADB可执行文件路径
    """
    if Config.ADB_PATH:
        return Config.ADB_PATH

    # 1. 检查环境变量
    sdk_root = os.environ.get('ANDROID_HOME') or os.environ.get('ANDROID_SDK_ROOT')
    if sdk_root:
        adb = Path(sdk_root) / 'platform-tools' / 'adb'
        if adb.exists():
            return str(adb)

    # 2. 检查常见路径
    common_paths = [
        '/usr/local/bin/adb',
        '/usr/bin/adb',
        '~/Library/Android/sdk/platform-tools/adb',
        '~/Android/Sdk/platform-tools/adb',
    ]

    for path in common_paths:
        expanded = Path(path).expanduser()
        if expanded.exists():
            return str(expanded)

    # 3. 尝试直接调用adb（可能在PATH中）
    try:
        result = subprocess.run(['adb', 'version'], capture_output=True, timeout=2)
        if result.returncode == 0:
            return 'adb'
    except (OSError, subprocess.TimeoutExpired):
        pass

    raise FileNotFoundError(
        "未找到ADB，请安装Android SDK Platform Tools\n"
        "下载地址: https://developer.android.com/studio/releases/platform-tools"
    )


class LocalDeviceManager(DeviceManager):
    """
    本机设备管理器

    用法:
        manager = LocalDeviceManager()
        devices = manager.list_devices()
        driver = manager.select_device("android", "emulator-5554")
    """

    def __init__(
        self,
        android_driver_factory: Optional[Callable[[str], IDriver]] = None,
        ios_driver_factory: Optional[Callable[[str], IOSDriver]] = None,
    ):
        self._adb_path: Optional[str] = None
        self._android_driver_factory = android_driver_factory or self._create_android_driver
        self._ios_driver_factory = ios_driver_factory or IOSDriver

    @property
    def adb_path(self) -> str:
        if self._adb_path is None:
            self._adb_path = find_adb()
        return self._adb_path

    def _create_android_driver(self, serial: str) -> IDriver:
        return AndroidDriver(serial, adb_path=self.adb_path)

    # ==================== 枚举 ====================

    def list_android_serials(self) -> List[str]:
        """adb devices 中状态为 device 的序列号"""
        try:
            result = subprocess.run(
                [self.adb_path, "devices"],
                capture_output=True,
                text=True,
                timeout=5
            )
        except subprocess.TimeoutExpired:
            raise DriverError("ADB命令超时，请检查设备连接")
        except OSError as e:
            raise DriverError(f"ADB命令执行失败: {e}")

        if result.returncode != 0:
            raise DriverError(f"ADB命令执行失败: {result.stderr}")

        serials = []
        for line in result.stdout.strip().split('\n')[1:]:  # 跳过第一行标题
            parts = line.split('\t')
            if len(parts) >= 2 and parts[1].strip() == 'device':  # 只返回已连接的设备
                serials.append(parts[0].strip())
        return serials

    def list_ios_udids(self) -> List[str]:
        """usbmux 中的 iOS 设备 UDID"""
        tidevice = require_tidevice()
        try:
            return [d.udid for d in tidevice.Usbmux().device_list()]
        except Exception as e:
            raise DriverError(f"获取iOS设备列表失败: {e}") from e

    def list_devices(self) -> DeviceList:
        devices = DeviceList()

        try:
            devices.android = self.list_android_serials()
        except (DriverError, FileNotFoundError) as e:
            logger.warning(f"⚠️ 获取Android设备列表失败: {e}")

        try:
            udids = self.list_ios_udids()
        except (DriverError, ImportError) as e:
            logger.warning(f"⚠️ 获取iOS设备列表失败: {e}")
            udids = []

        for udid in udids:
            try:
                self.pair(DeviceDescriptor(Platform.IOS, udid))
            except DriverError as e:
                # 无法连接或配对的设备不返回
                logger.error(f"❌ iOS设备不可用，已跳过: {udid}: {e}")
                continue
            devices.ios.append(udid)

        logger.info(
            f"📱 找到 {devices.total} 个设备 "
            f"(Android {len(devices.android)}, iOS {len(devices.ios)})"
        )
        return devices

    # ==================== 配对 ====================

    def pair(self, device: DeviceDescriptor):
        """
        iOS 设备配对，失败时按 PAIR_RETRY_DELAY 起步、逐次翻倍重试

        Android 设备不需要配对，直接返回
        """
        if device.platform != Platform.IOS:
            return

        retries = max(1, Config.PAIR_RETRY_COUNT)
        delay = Config.PAIR_RETRY_DELAY
        for attempt in range(1, retries + 1):
            try:
                driver = self._ios_driver_factory(device.serial)
                driver.pair()
                return
            except DriverError as e:
                if attempt == retries:
                    raise
                logger.warning(f"⚠️ 配对失败，{delay:.1f}秒后重试 ({attempt}/{retries}): {e}")
                time.sleep(delay)
                delay *= 2

    # ==================== 选择设备 ====================

    def select_device(self, platform: Optional[str] = None, serial: Optional[str] = None) -> IDriver:
        platform = (platform or Config.DEFAULT_PLATFORM).lower()
        try:
            target = Platform(platform)
        except ValueError:
            raise ValueError(f"不支持的平台: {platform}")

        if target == Platform.ANDROID:
            available = self.list_android_serials()
        else:
            available = self.list_ios_udids()

        if not serial:
            if not available:
                raise DeviceNotFoundError(f"未找到连接的{target.value}设备，请连接设备后重试")
            serial = available[0]
            logger.info(f"📱 自动选择设备: {serial}")
        elif serial not in available:
            raise DeviceNotFoundError(f"设备未连接: {target.value} {serial}")

        if target == Platform.ANDROID:
            return self._android_driver_factory(serial)

        self.pair(DeviceDescriptor(Platform.IOS, serial))
        return self._ios_driver_factory(serial)
