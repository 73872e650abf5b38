#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
工具协议

每个工具提供五项能力：
- name: 路由用的稳定名称
- description: 给上游 AI 选择工具时看的说明
- options(): 参数声明（类型、可选枚举值、说明），同时生成 inputSchema
- handle(): 执行工具，返回统一的 ToolResult
- convert_action_to_call_tool_request(): 把上游规划出的 MobileAction 转换成工具调用
"""
import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..core.driver import DeviceManager, IDriver
from .arguments import Arguments, DeviceArguments


# 参数类型 -> JSON Schema 类型
OPTION_TYPES = ("string", "number", "boolean", "object")


@dataclass
class ToolOption:
    """工具参数声明"""
    name: str
    type: str
    description: str = ""
    enum: Optional[List[str]] = None

    def __post_init__(self):
        if self.type not in OPTION_TYPES:
            raise ValueError(f"unsupported option type: {self.type}")

    def to_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.enum:
            schema["enum"] = list(self.enum)
        return schema

    def accepts(self, value: Any) -> bool:
        """值是否符合声明的类型（空字符串视为未设置）"""
        if self.type == "string":
            return isinstance(value, str) and value != ""
        if self.type == "number":
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        if self.type == "boolean":
            return isinstance(value, bool)
        if self.type == "object":
            return isinstance(value, Mapping)
        return False

    def normalize(self, value: Any) -> Any:
        if self.type == "number":
            return float(value)
        if self.type == "object":
            return dict(value)
        return value


@dataclass
class CallToolRequest:
    """一次工具调用：工具名 + 参数"""
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ActionOptions:
    """
    MobileAction 上的通用选项

    typed 字段优先级最低，只用来补齐调用中缺失的参数；
    custom 中的键优先级最高
    """
    platform: str = ""
    serial: str = ""
    duration: float = 0.0
    screen_record_path: str = ""
    screen_record_with_audio: bool = False
    screen_record_with_scrcpy: bool = False
    custom: Dict[str, Any] = field(default_factory=dict)

    def to_arguments(self) -> Dict[str, Any]:
        arguments: Dict[str, Any] = {}
        if self.platform:
            arguments["platform"] = self.platform
        if self.serial:
            arguments["serial"] = self.serial
        if self.duration > 0:
            arguments["duration"] = float(self.duration)
        if self.screen_record_path:
            arguments["screenRecordPath"] = self.screen_record_path
        if self.screen_record_with_audio:
            arguments["screenRecordWithAudio"] = True
        if self.screen_record_with_scrcpy:
            arguments["screenRecordWithScrcpy"] = True
        return arguments


@dataclass
class MobileAction:
    """
    上游规划出的动作

    params 可以是单个标量（作为工具的主参数）、dict（按参数名填充）或 None
    """
    method: str
    params: Any = None
    options: ActionOptions = field(default_factory=ActionOptions)


def data_field(json_name: str, desc: str = "", default: Any = None,
               omitempty: bool = False, default_factory: Any = None):
    """返回数据字段：记录 JSON 字段名、说明、是否省略零值"""
    metadata = {"json": json_name, "desc": desc, "omitempty": omitempty}
    if default_factory is not None:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def record_to_dict(record: Any) -> Dict[str, Any]:
    """把返回数据 dataclass 转成 JSON 字段名的 dict"""
    if record is None:
        return {}
    if isinstance(record, Mapping):
        return dict(record)
    if not is_dataclass(record):
        raise TypeError(f"unsupported return data: {type(record).__name__}")

    result = {}
    for f in fields(record):
        value = getattr(record, f.name)
        if f.metadata.get("omitempty") and not value:
            continue
        result[f.metadata.get("json", f.name)] = value
    return result


@dataclass
class ToolResult:
    """统一响应：成功（message + data）或失败（message）"""
    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "ToolResult":
        return cls(success=True, message=message, data=record_to_dict(data))

    @classmethod
    def fail(cls, message: str) -> "ToolResult":
        return cls(success=False, message=message)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.success:
            result["data"] = self.data or {}
        return result

    def to_text(self) -> str:
        """紧凑 JSON（无缩进，节省 token）"""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(',', ':'))


def build_call_tool_request(
    name: str,
    arguments: Dict[str, Any],
    action: MobileAction,
    option_names: Optional[Iterable[str]] = None,
) -> CallToolRequest:
    """
    构造工具调用，并用 action.options 的通用字段补齐缺失参数

    已有参数不会被覆盖；option_names 不为空时只补齐工具声明过的参数
    """
    allowed = set(option_names) if option_names is not None else None
    merged = dict(arguments)
    for key, value in action.options.to_arguments().items():
        if allowed is not None and key not in allowed:
            continue
        merged.setdefault(key, value)
    return CallToolRequest(name=name, arguments=merged)


def device_options(action: str) -> List[ToolOption]:
    """platform + serial 参数声明"""
    return [
        ToolOption("platform", "string", f"The platform type of device to {action}",
                   enum=["android", "ios"]),
        ToolOption("serial", "string", "The device serial number or UDID"),
    ]


class BaseTool(ABC):
    """工具基类"""

    name: str = ""
    description: str = ""
    # MobileAction.params 为标量时填充的参数名
    primary_argument: Optional[str] = None

    def __init__(self, device_manager: DeviceManager):
        self.device_manager = device_manager

    @abstractmethod
    def options(self) -> List[ToolOption]:
        ...

    @abstractmethod
    async def handle(self, arguments: Arguments) -> ToolResult:
        ...

    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {opt.name: opt.to_schema() for opt in self.options()},
            "required": [],
        }

    def convert_action_to_call_tool_request(self, action: MobileAction) -> CallToolRequest:
        """
        MobileAction -> CallToolRequest

        优先级（高 -> 低）：options.custom > params(dict) > params(标量) > options 通用字段
        """
        declared = {opt.name: opt for opt in self.options()}
        arguments: Dict[str, Any] = {}

        params = action.params
        if self.primary_argument and params is not None and not isinstance(params, Mapping):
            option = declared.get(self.primary_argument)
            if option is not None and option.accepts(params):
                arguments[self.primary_argument] = option.normalize(params)

        for source in (params, action.options.custom):
            if not isinstance(source, Mapping):
                continue
            for key, option in declared.items():
                if key in source and option.accepts(source[key]):
                    arguments[key] = option.normalize(source[key])

        return build_call_tool_request(self.name, arguments, action, declared.keys())

    async def setup_driver(self, device: DeviceArguments) -> IDriver:
        """
        解析目标设备（在线程中执行，避免阻塞其他调用）

        参数错误和设备解析失败都会直接抛出
        """
        device.validate()
        return await asyncio.to_thread(
            self.device_manager.select_device, device.platform, device.serial
        )
