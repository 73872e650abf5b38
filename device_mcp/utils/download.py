#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
文件下载工具
"""
import os
import tempfile
from pathlib import Path
from typing import Optional

import httpx

from ..config import Config
from ..errors import DownloadError
from .logger import get_logger

logger = get_logger('download')


async def download_file_by_url(
    url: str,
    directory: Optional[str] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    下载文件到本地临时文件

    文件名形如 download_xxxx.tmp，真实扩展名由调用方根据内容判断。

    Args:
        url: 文件地址（http/https）
        directory: 保存目录，默认 Config.DOWNLOAD_DIR
        timeout: 超时时间（秒），默认 Config.DOWNLOAD_TIMEOUT

    Returns:
        本地文件路径

    Raises:
        DownloadError: URL 非法、请求失败或返回非 2xx 状态码
    """
    directory = directory or Config.DOWNLOAD_DIR
    timeout = timeout if timeout is not None else Config.DOWNLOAD_TIMEOUT
    try:
        request_url = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise DownloadError(f"invalid url {url}: {e}") from e
    Path(directory).mkdir(parents=True, exist_ok=True)

    fd, file_path = tempfile.mkstemp(prefix='download_', suffix='.tmp', dir=directory)
    completed = False
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            async with client.stream('GET', request_url) as response:
                response.raise_for_status()
                with os.fdopen(fd, 'wb') as f:
                    fd = None
                    async for chunk in response.aiter_bytes():
                        f.write(chunk)
        completed = True
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise DownloadError(f"failed to download {url}: {e}") from e
    except OSError as e:
        raise DownloadError(f"failed to save {url}: {e}") from e
    finally:
        # 取消（CancelledError）同样需要清理
        if not completed:
            if fd is not None:
                os.close(fd)
            _remove_partial(file_path)

    logger.info(f"📥 下载完成: {url} -> {file_path}")
    return file_path


def _remove_partial(file_path: str):
    try:
        os.remove(file_path)
    except OSError as e:
        logger.warning(f"⚠️ 清理未完成的下载文件失败: {file_path}: {e}")
