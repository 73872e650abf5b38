"""
通用工具模块
"""

from .image_utils import detect_and_rename_image_file, sniff_content_type
from .download import download_file_by_url
from .logger import configure_logging, get_logger

__all__ = [
    'detect_and_rename_image_file',
    'sniff_content_type',
    'download_file_by_url',
    'configure_logging',
    'get_logger',
]
