#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
异常定义

硬错误（直接中断调用）：
- ToolArgumentError: 参数缺失或互斥参数冲突
- DownloadError: 远程图片下载失败
- DeviceNotFoundError: 无法解析目标设备

设备操作失败统一抛出 DriverError，由具体工具决定是中断还是包装为失败响应。
"""


class DeviceMCPError(Exception):
    """所有异常的基类"""


class ToolArgumentError(DeviceMCPError):
    """工具参数错误"""


class UnknownToolError(DeviceMCPError):
    """未注册的工具名"""

    def __init__(self, name: str):
        super().__init__(f"unknown tool: {name}")
        self.name = name


class DownloadError(DeviceMCPError):
    """下载失败"""


class DriverError(DeviceMCPError):
    """设备驱动操作失败（枚举、配对、推送、录屏等）"""


class DeviceNotFoundError(DriverError):
    """找不到指定的设备"""


class ImageDetectionError(DeviceMCPError):
    """图片类型检测失败"""

    def __init__(self, message: str, file_path: str = ""):
        super().__init__(message)
        self.file_path = file_path


class NotAnImageError(ImageDetectionError):
    """文件内容不是图片，file_path 为未改动的原始路径"""

    def __init__(self, file_path: str, content_type: str):
        super().__init__(f"not a recognized image type: {content_type}", file_path)
        self.content_type = content_type
