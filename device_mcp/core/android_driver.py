#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Android 设备驱动 - 基于 uiautomator2 + adb

功能：
1. 推送图片到相册（DCIM/Camera）并通知媒体库
2. 清空 DCIM/Camera
3. 录屏：adb screenrecord（最长 180 秒）或 scrcpy（支持更长时长和音频）
"""
import math
import os
import posixpath
import shlex
import signal
import subprocess
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..config import Config
from ..errors import DriverError
from ..utils.logger import get_logger
from .driver import IDriver, Platform, ScreenRecordOptions

logger = get_logger('android')

# 相册目录
CAMERA_DIR = "/sdcard/DCIM/Camera"

# 设备上的临时录屏文件
REMOTE_RECORD_PATH = "/sdcard/device_mcp_screenrecord.mp4"

# 轮询录屏进程的间隔（秒）
POLL_INTERVAL = 0.2

# 进程退出等待时间（秒）
STOP_TIMEOUT = 10


def time_limit(duration: float) -> int:
    """录屏时长 -> --time-limit 参数（整数秒，至少 1 秒，不足 1 秒向上取整）"""
    return max(1, math.ceil(duration))


class AndroidDriver(IDriver):
    """
    Android 设备驱动

    用法:
        driver = AndroidDriver("emulator-5554", adb_path="adb")
        driver.push_image("/tmp/a.png")
    """

    def __init__(self, serial: str, adb_path: str = "adb"):
        try:
            import uiautomator2 as u2
        except ImportError:
            raise ImportError(
                "uiautomator2未安装，请运行: pip install uiautomator2"
            )

        self.serial = serial
        self.adb_path = adb_path
        try:
            self.u2 = u2.connect(serial)
        except Exception as e:
            raise DriverError(f"连接Android设备失败: {serial}: {e}") from e

    @property
    def platform(self) -> Platform:
        return Platform.ANDROID

    @property
    def uuid(self) -> str:
        return self.serial

    def _shell(self, command: str) -> str:
        """执行 adb shell 命令，非零退出码视为失败"""
        try:
            response = self.u2.shell(command)
        except Exception as e:
            raise DriverError(f"adb shell 执行失败: {command}: {e}") from e
        if response.exit_code != 0:
            raise DriverError(f"adb shell 执行失败: {command}: {response.output.strip()}")
        return response.output

    def _scan_media(self, remote_path: str):
        self._shell(
            "am broadcast -a android.intent.action.MEDIA_SCANNER_SCAN_FILE -d "
            + shlex.quote(f"file://{remote_path}")
        )

    # ==================== 相册 ====================

    def push_image(self, image_path: str):
        if not os.path.isfile(image_path):
            raise DriverError(f"图片文件不存在: {image_path}")

        remote_path = posixpath.join(CAMERA_DIR, os.path.basename(image_path))
        self._shell(f"mkdir -p {shlex.quote(CAMERA_DIR)}")
        try:
            self.u2.push(image_path, remote_path)
        except Exception as e:
            raise DriverError(f"推送图片失败: {image_path}: {e}") from e
        self._scan_media(remote_path)
        logger.info(f"📤 图片已推送: {image_path} -> {remote_path}")

    def clear_images(self):
        self._shell(f"rm -rf {shlex.quote(CAMERA_DIR)}/*")
        self._scan_media(CAMERA_DIR)
        logger.info(f"🧹 已清空相册目录: {CAMERA_DIR}")

    # ==================== 录屏 ====================

    def screen_record(self, options: ScreenRecordOptions) -> str:
        output_path = options.path or self._default_record_path()
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        if options.method == "scrcpy":
            self._record_with_scrcpy(options, output_path)
        else:
            self._record_with_adb(options, output_path)

        if not os.path.exists(output_path):
            raise DriverError(f"录屏文件未生成: {output_path}")
        return output_path

    def _default_record_path(self) -> str:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        safe_serial = self.serial.replace(":", "_")
        return str(Path(Config.SCREEN_RECORD_DIR) / f"screenrecord_{safe_serial}_{timestamp}.mp4")

    def _record_with_adb(self, options: ScreenRecordOptions, output_path: str):
        limit = Config.ADB_RECORD_LIMIT
        duration = options.duration
        if duration <= 0 or duration > limit:
            if duration > limit:
                logger.warning(f"⚠️ adb 录屏最长 {limit} 秒，已截断 (请求 {duration} 秒)")
            duration = limit

        command = [
            self.adb_path, "-s", self.serial, "shell", "screenrecord",
            "--time-limit", str(time_limit(duration)), REMOTE_RECORD_PATH,
        ]
        logger.info(f"🎬 开始录屏 (adb): {self.serial}, {time_limit(duration)} 秒")
        process = self._start(command)
        cancelled = self._wait(process, options, duration)
        if cancelled:
            # 让设备端 screenrecord 正常收尾，写完 moov
            try:
                self.u2.shell("pkill -INT screenrecord")
            except Exception as e:
                logger.warning(f"⚠️ 停止设备端录屏失败: {e}")
            self._stop(process)
            # 设备端写文件需要一点时间
            time.sleep(1)
        elif process.returncode != 0:
            raise DriverError(f"adb screenrecord 失败，退出码: {process.returncode}")

        try:
            self.u2.pull(REMOTE_RECORD_PATH, output_path)
            self.u2.shell(f"rm -f {shlex.quote(REMOTE_RECORD_PATH)}")
        except Exception as e:
            raise DriverError(f"拉取录屏文件失败: {e}") from e
        logger.info(f"✅ 录屏完成: {output_path}")

    def _record_with_scrcpy(self, options: ScreenRecordOptions, output_path: str):
        command: List[str] = [
            Config.SCRCPY_PATH, "-s", self.serial,
            "--no-playback", "--record", output_path,
        ]
        if not options.with_audio:
            command.append("--no-audio")
        if options.duration > 0:
            command += ["--time-limit", str(time_limit(options.duration))]

        logger.info(f"🎬 开始录屏 (scrcpy): {self.serial}")
        process = self._start(command)
        cancelled = self._wait(process, options, options.duration)
        if cancelled:
            self._stop(process)
        elif process.returncode not in (0, None):
            raise DriverError(f"scrcpy 录屏失败，退出码: {process.returncode}")
        logger.info(f"✅ 录屏完成: {output_path}")

    @staticmethod
    def _start(command: List[str]) -> subprocess.Popen:
        try:
            return subprocess.Popen(
                command,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise DriverError(f"启动录屏进程失败: {command[0]}: {e}") from e

    @staticmethod
    def _wait(process: subprocess.Popen, options: ScreenRecordOptions, duration: float) -> bool:
        """
        等待录屏进程结束

        Returns:
            是否因取消或超时而需要主动停止
        """
        # 进程自身会按 time-limit 退出，这里多留一点余量
        deadline: Optional[float] = None
        if duration > 0:
            deadline = time.monotonic() + duration + STOP_TIMEOUT

        while process.poll() is None:
            if options.cancel_event.is_set():
                logger.info("⏹️ 录屏被取消")
                return True
            if deadline is not None and time.monotonic() > deadline:
                logger.warning("⚠️ 录屏进程超时未退出，强制停止")
                return True
            options.cancel_event.wait(POLL_INTERVAL)
        return False

    @staticmethod
    def _stop(process: subprocess.Popen):
        """先发送 SIGINT 让进程正常收尾，超时再 kill"""
        if process.poll() is not None:
            return
        if sys.platform != "win32":
            process.send_signal(signal.SIGINT)
        else:
            process.terminate()
        try:
            process.wait(timeout=STOP_TIMEOUT)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
