#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
设备工具

- list_available_devices: 列出 Android / iOS 设备
- select_device: 选择设备
- screenrecord: 录屏
- push_image: 推送图片到相册（支持本地路径或 URL）
- clear_image: 清空相册
"""
import asyncio
import os
from dataclasses import dataclass
from typing import List

from ..errors import DriverError, ImageDetectionError
from ..utils import image_utils
from ..utils import download
from ..utils.logger import get_logger
from .arguments import (
    Arguments,
    DeviceArguments,
    PushImageArguments,
    ScreenRecordArguments,
)
from .base import BaseTool, ToolOption, ToolResult, data_field, device_options

logger = get_logger('device_tools')


# ==================== 返回数据 ====================

@dataclass
class ListDevicesData:
    android_devices: List[str] = data_field("androidDevices", "List of Android device serial numbers",
                                            default_factory=list)
    ios_devices: List[str] = data_field("iosDevices", "List of iOS device UDIDs", default_factory=list)
    total_count: int = data_field("totalCount", "Total number of available devices", default=0)
    android_count: int = data_field("androidCount", "Number of Android devices", default=0)
    ios_count: int = data_field("iosCount", "Number of iOS devices", default=0)


@dataclass
class SelectDeviceData:
    device_uuid: str = data_field("deviceUUID", "UUID of the selected device", default="")


@dataclass
class ScreenRecordData:
    video_path: str = data_field("videoPath", "Path to the recorded video file", default="")
    duration: float = data_field("duration", "Duration of the recording in seconds", default=0.0)
    method: str = data_field("method", "Recording method used (adb or scrcpy)", default="adb")


@dataclass
class PushImageData:
    image_path: str = data_field("imagePath", "Path of the image that was pushed", default="")
    image_url: str = data_field("imageUrl", "URL of the image that was downloaded and pushed",
                                default="", omitempty=True)
    cleared: bool = data_field("cleared", "Whether images were cleared before pushing",
                               default=False, omitempty=True)


@dataclass
class ClearImageData:
    success: bool = data_field("success", "Whether the operation was successful", default=True)


def remove_file(file_path: str):
    """尽力删除文件，失败只记录日志"""
    try:
        os.remove(file_path)
    except OSError as e:
        logger.warning(f"⚠️ 删除文件失败: {file_path}: {e}")


# ==================== 工具 ====================

class ListAvailableDevicesTool(BaseTool):
    name = "list_available_devices"
    description = (
        "List all available devices including Android devices and iOS devices. "
        "If there are multiple devices returned, you need to let the user select one of them."
    )

    def options(self) -> List[ToolOption]:
        return []

    async def handle(self, arguments: Arguments) -> ToolResult:
        try:
            devices = await asyncio.to_thread(self.device_manager.list_devices)
        except DriverError as e:
            logger.error(f"❌ 获取设备列表失败: {e}")
            return ToolResult.fail(f"Failed to list devices: {e}")

        message = (
            f"Found {devices.total} available devices "
            f"({len(devices.android)} Android, {len(devices.ios)} iOS)"
        )
        return ToolResult.ok(message, ListDevicesData(
            android_devices=list(devices.android),
            ios_devices=list(devices.ios),
            total_count=devices.total,
            android_count=len(devices.android),
            ios_count=len(devices.ios),
        ))


class SelectDeviceTool(BaseTool):
    name = "select_device"
    description = (
        "Select a device to use from the list of available devices. "
        "Use the list_available_devices tool first to get a list of available devices."
    )
    primary_argument = "serial"

    def options(self) -> List[ToolOption]:
        return [
            ToolOption("platform", "string", "The platform type of device to select",
                       enum=["android", "ios"]),
            ToolOption("serial", "string", "The device serial number or UDID to select"),
        ]

    async def handle(self, arguments: Arguments) -> ToolResult:
        driver = await self.setup_driver(DeviceArguments.from_arguments(arguments))
        uuid = driver.uuid
        return ToolResult.ok(f"Selected device: {uuid}", SelectDeviceData(device_uuid=uuid))


class ScreenRecordTool(BaseTool):
    name = "screenrecord"
    description = (
        "Record the screen of the mobile device. Supports both ADB screenrecord and scrcpy "
        "recording methods. ADB recording is limited to 180 seconds, while scrcpy supports "
        "longer recordings and audio capture on Android 11+."
    )
    primary_argument = "duration"

    def options(self) -> List[ToolOption]:
        return device_options("record") + [
            ToolOption("duration", "number",
                       "Recording duration in seconds. If not specified, recording will continue "
                       "until manually stopped. ADB recording is limited to 180 seconds."),
            ToolOption("screenRecordPath", "string",
                       "Custom path for the output video file. If not specified, "
                       "a timestamped filename will be generated."),
            ToolOption("screenRecordWithAudio", "boolean",
                       "Enable audio recording (requires scrcpy and Android 11+). Default: false"),
            ToolOption("screenRecordWithScrcpy", "boolean",
                       "Force use of scrcpy for recording instead of ADB. "
                       "Default: false (auto-detect based on audio requirement)"),
        ]

    async def handle(self, arguments: Arguments) -> ToolResult:
        args = ScreenRecordArguments.from_arguments(arguments)
        driver = await self.setup_driver(args)

        options = args.to_options()
        try:
            video_path = await asyncio.to_thread(driver.screen_record, options)
        except asyncio.CancelledError:
            # 通知录屏线程尽快停止，调用方不等待它收尾
            options.cancel_event.set()
            raise
        except DriverError as e:
            logger.error(f"❌ 录屏失败: {e}")
            return ToolResult.fail(f"Failed to record screen: {e}")

        message = f"Screen recording completed successfully. Video saved to: {video_path}"
        return ToolResult.ok(message, ScreenRecordData(
            video_path=video_path,
            duration=options.duration,
            method=options.method,
        ))


class PushImageTool(BaseTool):
    name = "push_image"
    description = (
        "Push an image to the device's gallery. For Android, the image will be pushed to the "
        "DCIM/Camera directory. For iOS, the image will be added to the device's photo album."
    )
    primary_argument = "imageUrl"

    def options(self) -> List[ToolOption]:
        return device_options("push image to") + [
            ToolOption("imagePath", "string", "Path to the local image file to push to the device"),
            ToolOption("imageUrl", "string", "URL of the image to download and push to the device"),
            ToolOption("cleanup", "boolean",
                       "Whether to delete the downloaded file after pushing it to the device"),
            ToolOption("clearBefore", "boolean", "Whether to clear images before pushing"),
        ]

    async def handle(self, arguments: Arguments) -> ToolResult:
        args = PushImageArguments.from_arguments(arguments)
        args.validate()

        image_path = args.image_path
        downloaded = False
        if args.image_url:
            logger.info(f"📥 从URL下载图片: {args.image_url}")
            image_path = await download.download_file_by_url(args.image_url)
            downloaded = True

        should_cleanup = downloaded and args.cleanup
        cleared = False
        # 取消（CancelledError）也要清理已下载的文件
        try:
            if downloaded:
                try:
                    image_path = await asyncio.to_thread(image_utils.detect_and_rename_image_file, image_path)
                except ImageDetectionError as e:
                    logger.warning(f"⚠️ 图片类型检测或重命名失败，使用原文件: {e}")
                    image_path = e.file_path or image_path

            driver = await self.setup_driver(args)

            if args.clear_before:
                logger.info("🧹 推送前清空相册")
                try:
                    await asyncio.to_thread(driver.clear_images)
                    cleared = True
                except DriverError as e:
                    logger.warning(f"⚠️ 清空相册失败，继续推送: {e}")

            await asyncio.to_thread(driver.push_image, image_path)
        except BaseException:
            if should_cleanup:
                remove_file(image_path)
            raise

        if should_cleanup:
            logger.info(f"🧹 清理已下载的图片: {image_path}")
            remove_file(image_path)

        message = "Successfully pushed image to device"
        if args.image_url:
            message = f"Successfully downloaded and pushed image from {args.image_url} to device"
        if cleared:
            message = f"{message} (images cleared before pushing)"

        return ToolResult.ok(message, PushImageData(
            image_path=image_path,
            image_url=args.image_url,
            cleared=cleared,
        ))


class ClearImageTool(BaseTool):
    name = "clear_image"
    description = (
        "Clear images from the device's gallery. For Android, this will remove all images from "
        "the DCIM/Camera directory. For iOS, this will clear the images added through the "
        "push_image tool."
    )

    def options(self) -> List[ToolOption]:
        return device_options("clear images from")

    async def handle(self, arguments: Arguments) -> ToolResult:
        driver = await self.setup_driver(DeviceArguments.from_arguments(arguments))
        try:
            await asyncio.to_thread(driver.clear_images)
        except DriverError as e:
            logger.error(f"❌ 清空相册失败: {e}")
            return ToolResult.fail(f"Failed to clear images: {e}")
        return ToolResult.ok("Successfully cleared images from device", ClearImageData(success=True))


DEVICE_TOOLS = [
    ListAvailableDevicesTool,
    SelectDeviceTool,
    ScreenRecordTool,
    PushImageTool,
    ClearImageTool,
]
