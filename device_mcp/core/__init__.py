"""
设备核心模块
"""

from .driver import (
    DeviceDescriptor,
    DeviceList,
    DeviceManager,
    IDriver,
    Platform,
    ScreenRecordOptions,
)
from .device_manager import LocalDeviceManager

__all__ = [
    'DeviceDescriptor',
    'DeviceList',
    'DeviceManager',
    'IDriver',
    'Platform',
    'ScreenRecordOptions',
    'LocalDeviceManager',
]
