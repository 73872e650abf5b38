#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
统一的日志管理器

MCP Server 通过 stdio 通信，所有日志必须输出到 stderr，避免直接使用 print 导致的 JSON 解析错误
"""

import logging
import sys
from typing import Optional

# 创建logger
logger = logging.getLogger('device_mcp')

# 默认配置标志
_configured = False

_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}


def configure_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    enable_console: bool = True,
):
    """
    配置日志系统

    Args:
        level: 日志级别（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        log_file: 日志文件路径（可选）
        enable_console: 是否输出到控制台（默认True）
    """
    global _configured
    if _configured:
        return

    log_level = _LEVELS.get(level.upper(), logging.INFO)
    logger.setLevel(log_level)

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # 控制台处理器（输出到stderr，避免与MCP协议混淆）
    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # 文件处理器
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    获取logger实例

    Args:
        name: logger名称（可选），会挂在 device_mcp 命名空间下

    Returns:
        logger实例
    """
    if name:
        return logging.getLogger(f'device_mcp.{name}')
    return logger
