#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
设备能力接口

工具层只依赖这里定义的接口：
- DeviceManager: 枚举 / 配对 / 选择设备
- IDriver: 已选中的设备句柄，提供推图、清图、录屏能力

具体实现见 device_manager.py、android_driver.py、ios_driver.py
"""
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Platform(str, Enum):
    """设备平台"""
    ANDROID = "android"
    IOS = "ios"


@dataclass(frozen=True)
class DeviceDescriptor:
    """枚举得到的设备：平台 + 序列号/UDID"""
    platform: Platform
    serial: str


@dataclass
class DeviceList:
    """设备枚举结果"""
    android: List[str] = field(default_factory=list)
    ios: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.android) + len(self.ios)


@dataclass
class ScreenRecordOptions:
    """
    录屏参数

    Attributes:
        duration: 录制时长（秒），0 表示直到被取消
        path: 输出文件路径，为空时自动生成带时间戳的文件名
        with_audio: 录制音频（需要 scrcpy + Android 11+）
        with_scrcpy: 强制使用 scrcpy
        cancel_event: 被 set 后驱动应尽快结束录制
    """
    duration: float = 0.0
    path: str = ""
    with_audio: bool = False
    with_scrcpy: bool = False
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @property
    def method(self) -> str:
        if self.with_scrcpy or self.with_audio:
            return "scrcpy"
        return "adb"


class IDriver(ABC):
    """已连接设备的驱动句柄"""

    @property
    @abstractmethod
    def platform(self) -> Platform:
        ...

    @property
    @abstractmethod
    def uuid(self) -> str:
        """设备序列号（Android）或 UDID（iOS）"""

    @abstractmethod
    def push_image(self, image_path: str):
        """把本地图片推送到设备相册"""

    @abstractmethod
    def clear_images(self):
        """清空设备相册中的图片"""

    @abstractmethod
    def screen_record(self, options: ScreenRecordOptions) -> str:
        """录屏，返回本地视频文件路径"""


class DeviceManager(ABC):
    """设备管理接口"""

    @abstractmethod
    def list_devices(self) -> DeviceList:
        """列出可用设备（无法连接或配对失败的设备不会出现在结果中）"""

    @abstractmethod
    def pair(self, device: DeviceDescriptor):
        """与设备配对（幂等）"""

    @abstractmethod
    def select_device(self, platform: Optional[str] = None, serial: Optional[str] = None) -> IDriver:
        """
        解析平台 + 序列号为已连接的设备句柄

        Args:
            platform: android / ios，为空时使用默认平台
            serial: 设备序列号，为空时选择该平台的第一个设备
        """
