"""
MCP 工具注册表

用法:
    tools = build_tools(LocalDeviceManager())
    result = await dispatch(tools, "list_available_devices", {})
"""
from typing import Any, Dict, Mapping, Optional

from ..core.driver import DeviceManager
from ..errors import UnknownToolError
from .base import (
    ActionOptions,
    BaseTool,
    CallToolRequest,
    MobileAction,
    ToolOption,
    ToolResult,
    build_call_tool_request,
)
from .device_tools import DEVICE_TOOLS


def build_tools(device_manager: DeviceManager) -> Dict[str, BaseTool]:
    """按名称注册所有工具"""
    return {tool_cls.name: tool_cls(device_manager) for tool_cls in DEVICE_TOOLS}


def get_tool(tools: Mapping[str, BaseTool], name: str) -> BaseTool:
    tool = tools.get(name)
    if tool is None:
        raise UnknownToolError(name)
    return tool


async def dispatch(
    tools: Mapping[str, BaseTool],
    name: str,
    arguments: Optional[Mapping[str, Any]] = None,
) -> ToolResult:
    """路由工具调用"""
    return await get_tool(tools, name).handle(arguments or {})


__all__ = [
    'ActionOptions',
    'BaseTool',
    'CallToolRequest',
    'MobileAction',
    'ToolOption',
    'ToolResult',
    'build_call_tool_request',
    'build_tools',
    'get_tool',
    'dispatch',
]
