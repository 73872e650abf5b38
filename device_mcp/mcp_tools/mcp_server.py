#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Device MCP Server - 统一入口

通过 MCP 协议暴露设备工具：
- list_available_devices / select_device
- screenrecord
- push_image / clear_image

使用方式：
    device-mcp

配置 Cursor：
    {
        "mcpServers": {
            "device": {
                "command": "device-mcp",
                "env": {
                    "MOBILE_PLATFORM": "android"  // 或 "ios"
                }
            }
        }
    }
"""

import asyncio
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from ..config import Config
from ..core.device_manager import LocalDeviceManager
from ..core.driver import DeviceManager
from ..tools import build_tools, dispatch
from ..utils.logger import configure_logging, get_logger

logger = get_logger('server')


class MobileDeviceMCPServer:
    """Device MCP Server"""

    def __init__(self, device_manager: Optional[DeviceManager] = None):
        self.device_manager = device_manager or LocalDeviceManager()
        self.tools = build_tools(self.device_manager)

    def get_tools(self) -> List[Tool]:
        """注册 MCP 工具"""
        return [
            Tool(
                name=tool.name,
                description=tool.description,
                inputSchema=tool.input_schema(),
            )
            for tool in self.tools.values()
        ]

    async def handle_tool_call(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        """
        处理工具调用

        参数错误、下载失败、设备解析失败会直接抛出，由 MCP 框架转换为错误结果；
        设备操作失败以 success=false 的 JSON 返回
        """
        logger.info(f"🔧 调用工具: {name}")
        try:
            result = await dispatch(self.tools, name, arguments)
        except Exception as e:
            logger.error(f"❌ 执行失败: {name}: {e}")
            raise
        return [TextContent(type="text", text=result.to_text())]


async def async_main():
    """启动 MCP Server（异步版本）"""
    configure_logging(level=Config.LOG_LEVEL, log_file=Config.LOG_FILE)

    server = MobileDeviceMCPServer()
    mcp_server = Server("device-mcp")

    @mcp_server.list_tools()
    async def list_tools():
        return server.get_tools()

    @mcp_server.call_tool()
    async def call_tool(name: str, arguments: dict):
        return await server.handle_tool_call(name, arguments)

    logger.info(f"🚀 Device MCP Server 启动中... [{len(server.tools)} 个工具]")
    logger.info(f"📱 默认平台: {Config.DEFAULT_PLATFORM}")
    logger.debug(f"配置: {Config.get_summary()}")

    async with stdio_server() as (read_stream, write_stream):
        await mcp_server.run(read_stream, write_stream, mcp_server.create_initialization_options())


def main():
    """入口点函数（供 pip 安装后使用）"""
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("⚠️ Device MCP Server 已停止")


if __name__ == "__main__":
    main()
