#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
图片类型检测 - 根据文件头识别真实类型并修正扩展名

从 URL 下载的图片往往没有扩展名（或扩展名不可信），而 Android 媒体库
和 iOS 相册都依赖扩展名识别图片，因此推送前需要先嗅探内容类型。

嗅探规则与浏览器的 MIME sniffing 签名表一致（只看前 512 字节），
额外补充了 TIFF 和 SVG 两种签名。
"""
import os
import struct
from typing import Callable, List, Optional, Tuple

from ..errors import ImageDetectionError, NotAnImageError
from .logger import get_logger

logger = get_logger('image_utils')

# 嗅探只读取文件头
SNIFF_LEN = 512

# 内容类型 -> 扩展名（按顺序匹配）
IMAGE_EXTENSIONS: List[Tuple[str, str]] = [
    ('image/jpeg', '.jpg'),
    ('image/png', '.png'),
    ('image/gif', '.gif'),
    ('image/webp', '.webp'),
    ('image/bmp', '.bmp'),
    ('image/tiff', '.tiff'),
    ('image/svg+xml', '.svg'),
]

# 已经带有这些扩展名时视为正确，不再重命名
EXTENSION_ALIASES = {
    '.jpg': ('.jpg', '.jpeg'),
    '.tiff': ('.tiff', '.tif'),
}

_WHITESPACE = b'\t\n\x0c\r '

# 终止 HTML 标签的字节
_TAG_TERMINATORS = b' >'

_HTML_TAGS = [
    b'<!DOCTYPE HTML', b'<HTML', b'<HEAD', b'<SCRIPT', b'<IFRAME', b'<H1',
    b'<DIV', b'<FONT', b'<TABLE', b'<A', b'<STYLE', b'<TITLE', b'<B',
    b'<BODY', b'<BR', b'<P', b'<!--',
]

# (前缀, 内容类型)
_EXACT_SIGNATURES: List[Tuple[bytes, str]] = [
    (b'%PDF-', 'application/pdf'),
    (b'%!PS-Adobe-', 'application/postscript'),
    # BOM
    (b'\xfe\xff', 'text/plain; charset=utf-16be'),
    (b'\xff\xfe', 'text/plain; charset=utf-16le'),
    (b'\xef\xbb\xbf', 'text/plain; charset=utf-8'),
    # 图片
    (b'\x00\x00\x01\x00', 'image/x-icon'),
    (b'\x00\x00\x02\x00', 'image/x-icon'),
    (b'BM', 'image/bmp'),
    (b'GIF87a', 'image/gif'),
    (b'GIF89a', 'image/gif'),
    (b'\x89PNG\r\n\x1a\n', 'image/png'),
    (b'\xff\xd8\xff', 'image/jpeg'),
    (b'II*\x00', 'image/tiff'),
    (b'MM\x00*', 'image/tiff'),
    # 音视频
    (b'ID3', 'audio/mpeg'),
    (b'OggS\x00', 'application/ogg'),
    (b'MThd\x00\x00\x00\x06', 'audio/midi'),
    (b'\x1a\x45\xdf\xa3', 'video/webm'),
    # 字体
    (b'wOFF', 'font/woff'),
    (b'wOF2', 'font/woff2'),
    (b'OTTO', 'font/otf'),
    (b'\x00\x01\x00\x00', 'font/ttf'),
    (b'ttcf', 'font/collection'),
    # 压缩包
    (b'\x1f\x8b\x08', 'application/x-gzip'),
    (b'PK\x03\x04', 'application/zip'),
    (b'Rar!\x1a\x07\x00', 'application/x-rar-compressed'),
    (b'Rar!\x1a\x07\x01\x00', 'application/x-rar-compressed'),
    (b'\x00asm', 'application/wasm'),
]

# (掩码, 模式, 内容类型)，按字节做与运算后比较
_MASKED_SIGNATURES: List[Tuple[bytes, bytes, str]] = [
    (b'\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff\xff\xff',
     b'RIFF\x00\x00\x00\x00WEBPVP', 'image/webp'),
    (b'\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff',
     b'FORM\x00\x00\x00\x00AIFF', 'audio/aiff'),
    (b'\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff',
     b'RIFF\x00\x00\x00\x00AVI ', 'video/avi'),
    (b'\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff',
     b'RIFF\x00\x00\x00\x00WAVE', 'audio/wave'),
]


def _skip_whitespace(data: bytes) -> bytes:
    return data.lstrip(_WHITESPACE)


def _match_html(data: bytes) -> Optional[str]:
    data = _skip_whitespace(data)
    upper = data.upper()
    for tag in _HTML_TAGS:
        if len(data) <= len(tag):
            continue
        if upper.startswith(tag) and data[len(tag)] in _TAG_TERMINATORS:
            return 'text/html; charset=utf-8'
    return None


def _match_markup(data: bytes) -> Optional[str]:
    data = _skip_whitespace(data)
    lower = data.lower()
    if lower.startswith(b'<svg') or lower.startswith(b'<!doctype svg'):
        return 'image/svg+xml'
    if lower.startswith(b'<?xml'):
        if b'<svg' in lower:
            return 'image/svg+xml'
        return 'text/xml; charset=utf-8'
    return None


def _match_exact(data: bytes) -> Optional[str]:
    for prefix, content_type in _EXACT_SIGNATURES:
        if data.startswith(prefix):
            return content_type
    return None


def _match_masked(data: bytes) -> Optional[str]:
    for mask, pattern, content_type in _MASKED_SIGNATURES:
        if len(data) < len(pattern):
            continue
        if all((data[i] & mask[i]) == pattern[i] for i in range(len(pattern))):
            return content_type
    return None


def _match_mp4(data: bytes) -> Optional[str]:
    if len(data) < 12:
        return None
    box_size = struct.unpack('>I', data[:4])[0]
    if len(data) < box_size or box_size % 4 != 0:
        return None
    if data[4:8] != b'ftyp':
        return None
    for start in range(8, box_size, 4):
        if start == 12:
            # 跳过 minor version
            continue
        if data[start:start + 3] == b'mp4':
            return 'video/mp4'
    return None


def _match_text(data: bytes) -> str:
    for byte in data:
        if byte <= 0x08 or byte == 0x0B or 0x0E <= byte <= 0x1A or 0x1C <= byte <= 0x1F:
            return 'application/octet-stream'
    return 'text/plain; charset=utf-8'


_MATCHERS: List[Callable[[bytes], Optional[str]]] = [
    _match_html,
    _match_markup,
    _match_exact,
    _match_masked,
    _match_mp4,
]


def sniff_content_type(data: bytes) -> str:
    """
    根据文件头判断内容类型

    Args:
        data: 文件开头的字节（超过 512 字节的部分会被忽略）

    Returns:
        MIME 类型字符串，无法识别时为 application/octet-stream 或 text/plain
    """
    data = data[:SNIFF_LEN]
    for matcher in _MATCHERS:
        content_type = matcher(data)
        if content_type:
            return content_type
    return _match_text(data)


def extension_for_content_type(content_type: str, file_path: str = "") -> str:
    """
    内容类型 -> 图片扩展名

    未知的 image/* 类型统一使用 .jpg；非图片抛出 NotAnImageError
    """
    for mime, extension in IMAGE_EXTENSIONS:
        if mime in content_type:
            return extension
    if 'image/' in content_type:
        return '.jpg'
    raise NotAnImageError(file_path, content_type)


def _has_extension(file_path: str, extension: str) -> bool:
    lower = file_path.lower()
    return any(lower.endswith(alias) for alias in EXTENSION_ALIASES.get(extension, (extension,)))


def detect_and_rename_image_file(file_path: str) -> str:
    """
    检测图片真实类型，并按需重命名为正确的扩展名

    Args:
        file_path: 本地文件路径

    Returns:
        文件的最终路径；已带有正确扩展名时原样返回，不做任何改动

    Raises:
        NotAnImageError: 内容不是图片（原文件保持不变，调用方不应删除）
        ImageDetectionError: 读取或重命名失败
    """
    try:
        with open(file_path, 'rb') as f:
            # 不足 512 字节时读到多少算多少
            head = f.read(SNIFF_LEN)
    except OSError as e:
        raise ImageDetectionError(f"failed to read file for type detection: {e}", file_path) from e

    content_type = sniff_content_type(head)
    logger.info(f"🔍 检测到内容类型: {content_type} ({file_path})")

    extension = extension_for_content_type(content_type, file_path)
    if _has_extension(file_path, extension):
        return file_path

    new_file_path = os.path.join(
        os.path.dirname(file_path),
        os.path.basename(file_path) + extension
    )
    try:
        os.rename(file_path, new_file_path)
    except OSError as e:
        raise ImageDetectionError(f"failed to rename file: {e}", file_path) from e

    logger.info(f"✅ 已按图片类型重命名: {file_path} -> {new_file_path}")
    return new_file_path
