#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
工具参数提取

MCP 传入的参数是无类型的 dict。这里的 get_* 函数永远不会抛异常：
缺失或类型不符时返回该类型的零值（""、0.0、False、{}），
是否把零值当作"未设置"由具体工具决定。

每个工具在入口处把参数转换成一个 dataclass，之后只和强类型字段打交道。
"""
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..core.driver import Platform, ScreenRecordOptions
from ..errors import ToolArgumentError

Arguments = Optional[Mapping[str, Any]]


def get_string(arguments: Arguments, key: str) -> str:
    value = (arguments or {}).get(key)
    return value if isinstance(value, str) else ""


def get_number(arguments: Arguments, key: str) -> float:
    """数字统一转为 float（bool 不算数字）"""
    value = (arguments or {}).get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def get_bool(arguments: Arguments, key: str) -> bool:
    value = (arguments or {}).get(key)
    return value if isinstance(value, bool) else False


def get_mapping(arguments: Arguments, key: str) -> Dict[str, Any]:
    value = (arguments or {}).get(key)
    return dict(value) if isinstance(value, Mapping) else {}


@dataclass
class DeviceArguments:
    """所有设备相关工具共用的设备定位参数"""
    platform: str = ""
    serial: str = ""

    @classmethod
    def from_arguments(cls, arguments: Arguments) -> "DeviceArguments":
        return cls(
            platform=get_string(arguments, "platform").lower(),
            serial=get_string(arguments, "serial"),
        )

    def validate(self):
        if self.platform and self.platform not in (p.value for p in Platform):
            raise ToolArgumentError(
                f"invalid platform: {self.platform!r}, must be one of android, ios"
            )


@dataclass
class ScreenRecordArguments(DeviceArguments):
    duration: float = 0.0
    screen_record_path: str = ""
    with_audio: bool = False
    with_scrcpy: bool = False

    @classmethod
    def from_arguments(cls, arguments: Arguments) -> "ScreenRecordArguments":
        device = DeviceArguments.from_arguments(arguments)
        return cls(
            platform=device.platform,
            serial=device.serial,
            duration=get_number(arguments, "duration"),
            screen_record_path=get_string(arguments, "screenRecordPath"),
            with_audio=get_bool(arguments, "screenRecordWithAudio"),
            with_scrcpy=get_bool(arguments, "screenRecordWithScrcpy"),
        )

    def to_options(self) -> ScreenRecordOptions:
        # 非正数时长视为未设置
        return ScreenRecordOptions(
            duration=self.duration if self.duration > 0 else 0.0,
            path=self.screen_record_path,
            with_audio=self.with_audio,
            with_scrcpy=self.with_scrcpy,
        )


@dataclass
class PushImageArguments(DeviceArguments):
    image_path: str = ""
    image_url: str = ""
    cleanup: bool = False
    clear_before: bool = False

    @classmethod
    def from_arguments(cls, arguments: Arguments) -> "PushImageArguments":
        device = DeviceArguments.from_arguments(arguments)
        return cls(
            platform=device.platform,
            serial=device.serial,
            image_path=get_string(arguments, "imagePath"),
            image_url=get_string(arguments, "imageUrl"),
            cleanup=get_bool(arguments, "cleanup"),
            clear_before=get_bool(arguments, "clearBefore"),
        )

    def validate(self):
        super().validate()
        if not self.image_path and not self.image_url:
            raise ToolArgumentError("either imagePath or imageUrl is required")
        if self.image_path and self.image_url:
            raise ToolArgumentError("imagePath and imageUrl are mutually exclusive, provide only one")
