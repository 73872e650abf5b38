#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
iOS 设备驱动 - 基于 tidevice

tidevice 只负责 usbmux 层的设备管理（枚举、配对、设备信息），
相册写入和录屏需要额外的设备端服务，目前不支持，调用时返回 DriverError。

前置条件：
    pip install tidevice
"""
from ..errors import DriverError
from ..utils.logger import get_logger
from .driver import IDriver, Platform, ScreenRecordOptions

logger = get_logger('ios')


def require_tidevice():
    try:
        import tidevice
    except ImportError as e:
        raise ImportError(
            f"缺少iOS自动化依赖: {e}\n"
            f"请运行以下命令安装:\n"
            f"  pip install tidevice\n"
        )
    return tidevice


class IOSDriver(IDriver):
    """
    iOS 设备驱动

    用法:
        driver = IOSDriver("00008030-001A...")
        print(driver.uuid, driver.name)
    """

    def __init__(self, udid: str):
        tidevice = require_tidevice()
        self.udid = udid
        try:
            self.device = tidevice.Device(udid)
            self.name = self.device.name
        except Exception as e:
            raise DriverError(f"连接iOS设备失败: {udid}: {e}") from e
        logger.info(f"📱 iOS设备已连接: {self.name} ({udid})")

    @property
    def platform(self) -> Platform:
        return Platform.IOS

    @property
    def uuid(self) -> str:
        return self.udid

    def pair(self):
        try:
            self.device.pair()
        except Exception as e:
            raise DriverError(f"iOS设备配对失败: {self.udid}: {e}") from e

    def push_image(self, image_path: str):
        raise DriverError("iOS 暂不支持推送图片到相册")

    def clear_images(self):
        raise DriverError("iOS 暂不支持清空相册")

    def screen_record(self, options: ScreenRecordOptions) -> str:
        raise DriverError("iOS 暂不支持录屏")
