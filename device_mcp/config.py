#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Device MCP 配置系统

功能：
1. 平台选择（默认平台）
2. 下载/录屏输出目录
3. 设备配对重试策略
4. 日志配置

所有配置项都可以通过环境变量或项目根目录下的 .env 文件覆盖。
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# 加载 .env（不覆盖已存在的环境变量）
load_dotenv()


class Config:
    """Device MCP 配置类"""

    # ==================== 平台支持 ====================
    # 默认平台（"android" 或 "ios"）
    # 兼容两种环境变量名：MOBILE_PLATFORM（新）和 DEFAULT_PLATFORM（旧）
    DEFAULT_PLATFORM: str = os.getenv(
        "MOBILE_PLATFORM",
        os.getenv("DEFAULT_PLATFORM", "android")
    ).lower()

    # ==================== 工具路径 ====================
    # ADB 路径（为空则自动查找）
    ADB_PATH: Optional[str] = os.getenv("ADB_PATH") or None

    # scrcpy 路径（默认从 PATH 中查找）
    SCRCPY_PATH: str = os.getenv("SCRCPY_PATH", "scrcpy")

    # ==================== 文件目录 ====================
    # 下载图片的保存目录
    DOWNLOAD_DIR: str = os.getenv(
        "DOWNLOAD_DIR",
        str(Path.cwd() / "downloads")
    )

    # 录屏文件的保存目录
    SCREEN_RECORD_DIR: str = os.getenv(
        "SCREEN_RECORD_DIR",
        str(Path.cwd() / "screenrecords")
    )

    # ==================== 网络 ====================
    # 下载超时（秒）
    DOWNLOAD_TIMEOUT: float = float(os.getenv("DOWNLOAD_TIMEOUT", "60"))

    # ==================== 设备管理 ====================
    # iOS 配对重试次数
    PAIR_RETRY_COUNT: int = int(os.getenv("PAIR_RETRY_COUNT", "3"))

    # iOS 配对首次重试间隔（秒），之后每次翻倍
    PAIR_RETRY_DELAY: float = float(os.getenv("PAIR_RETRY_DELAY", "1.0"))

    # adb screenrecord 最长录制时间（秒）
    ADB_RECORD_LIMIT: int = int(os.getenv("ADB_RECORD_LIMIT", "180"))

    # ==================== 日志 ====================
    # 日志级别
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # 日志文件（可选）
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE") or None

    @classmethod
    def get_summary(cls) -> dict:
        """获取配置摘要"""
        return {
            "platform": {
                "default": cls.DEFAULT_PLATFORM,
            },
            "paths": {
                "adb": cls.ADB_PATH or "auto",
                "scrcpy": cls.SCRCPY_PATH,
                "download_dir": cls.DOWNLOAD_DIR,
                "screen_record_dir": cls.SCREEN_RECORD_DIR,
            },
            "device": {
                "pair_retry_count": cls.PAIR_RETRY_COUNT,
                "pair_retry_delay": cls.PAIR_RETRY_DELAY,
                "adb_record_limit": cls.ADB_RECORD_LIMIT,
            },
            "logging": {
                "level": cls.LOG_LEVEL,
                "file": cls.LOG_FILE,
            },
        }
