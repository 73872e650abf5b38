"""
移动设备 MCP 工具

功能：
1. 列出 / 选择 Android、iOS 设备
2. 录屏（adb screenrecord / scrcpy）
3. 推送图片到相册（本地文件或 URL，自动识别图片类型）
4. 清空相册

使用示例：
    from device_mcp import LocalDeviceManager, build_tools, dispatch

    tools = build_tools(LocalDeviceManager())
    result = await dispatch(tools, "push_image", {"imageUrl": "https://example.com/a"})
    print(result.to_text())
"""

__version__ = "1.0.0"

from .core.device_manager import LocalDeviceManager
from .tools import build_tools, dispatch

__all__ = [
    'LocalDeviceManager',
    'build_tools',
    'dispatch',
]
