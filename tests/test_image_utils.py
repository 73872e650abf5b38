#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
图片类型检测测试
"""
import os

import pytest

from device_mcp.errors import ImageDetectionError, NotAnImageError
from device_mcp.utils.image_utils import (
    detect_and_rename_image_file,
    extension_for_content_type,
    sniff_content_type,
)

PNG = b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR' + b'\x00' * 64
JPEG = b'\xff\xd8\xff\xe0\x00\x10JFIF\x00' + b'\x00' * 64
GIF = b'GIF89a\x01\x00\x01\x00' + b'\x00' * 16
WEBP = b'RIFF\x24\x00\x00\x00WEBPVP8 ' + b'\x00' * 16
BMP = b'BM' + b'\x00' * 32
TIFF = b'II*\x00\x08\x00\x00\x00' + b'\x00' * 16
ICO = b'\x00\x00\x01\x00\x01\x00' + b'\x00' * 16
SVG = b'<?xml version="1.0"?>\n<svg xmlns="http://www.w3.org/2000/svg"></svg>'


def write(path, data: bytes) -> str:
    path.write_bytes(data)
    return str(path)


class TestSniffContentType:

    @pytest.mark.parametrize("data, expected", [
        (PNG, 'image/png'),
        (JPEG, 'image/jpeg'),
        (GIF, 'image/gif'),
        (WEBP, 'image/webp'),
        (BMP, 'image/bmp'),
        (TIFF, 'image/tiff'),
        (b'MM\x00*' + b'\x00' * 8, 'image/tiff'),
        (ICO, 'image/x-icon'),
        (SVG, 'image/svg+xml'),
        (b'  <svg width="10"></svg>', 'image/svg+xml'),
    ])
    def test_images(self, data, expected):
        assert sniff_content_type(data) == expected

    @pytest.mark.parametrize("data, expected", [
        (b'<!DOCTYPE html><html></html>', 'text/html; charset=utf-8'),
        (b'\n <html>', 'text/html; charset=utf-8'),
        (b'<?xml version="1.0"?><rss></rss>', 'text/xml; charset=utf-8'),
        (b'%PDF-1.7\n', 'application/pdf'),
        (b'PK\x03\x04\x14\x00', 'application/zip'),
        (b'RIFF\x24\x00\x00\x00WAVEfmt ', 'audio/wave'),
        (b'\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom', 'video/mp4'),
        (b'hello world', 'text/plain; charset=utf-8'),
        (b'\x00\x01\x02\x03garbage', 'application/octet-stream'),
    ])
    def test_non_images(self, data, expected):
        assert sniff_content_type(data) == expected

    def test_only_first_512_bytes_are_inspected(self):
        data = b'a' * 512 + b'\x00'
        assert sniff_content_type(data) == 'text/plain; charset=utf-8'

    def test_empty(self):
        assert sniff_content_type(b'') == 'text/plain; charset=utf-8'


class TestExtensionForContentType:

    def test_known_types(self):
        assert extension_for_content_type('image/jpeg') == '.jpg'
        assert extension_for_content_type('image/svg+xml') == '.svg'
        assert extension_for_content_type('image/tiff') == '.tiff'

    def test_unknown_image_defaults_to_jpg(self):
        assert extension_for_content_type('image/x-icon') == '.jpg'

    def test_not_an_image(self):
        with pytest.raises(NotAnImageError) as exc_info:
            extension_for_content_type('text/plain; charset=utf-8', '/tmp/a.txt')
        assert exc_info.value.file_path == '/tmp/a.txt'


class TestDetectAndRenameImageFile:

    def test_png_without_extension_is_renamed(self, tmp_path):
        original = write(tmp_path / 'download.tmp', PNG)

        result = detect_and_rename_image_file(original)

        assert result == str(tmp_path / 'download.tmp.png')
        assert os.path.exists(result)
        assert not os.path.exists(original)

    @pytest.mark.parametrize("name, data, suffix", [
        ('photo', JPEG, '.jpg'),
        ('anim', GIF, '.gif'),
        ('pic', WEBP, '.webp'),
        ('scan.dat', TIFF, '.tiff'),
        ('icon', ICO, '.jpg'),
        ('logo', SVG, '.svg'),
    ])
    def test_extension_follows_content(self, tmp_path, name, data, suffix):
        original = write(tmp_path / name, data)

        result = detect_and_rename_image_file(original)

        assert result == original + suffix
        assert not os.path.exists(original)

    def test_wrong_extension_gets_correct_one_appended(self, tmp_path):
        original = write(tmp_path / 'image.jpg', PNG)

        result = detect_and_rename_image_file(original)

        assert result == original + '.png'

    def test_correct_extension_is_left_alone(self, tmp_path):
        original = write(tmp_path / 'image.png', PNG)

        result = detect_and_rename_image_file(original)

        assert result == original
        assert os.listdir(tmp_path) == ['image.png']

    @pytest.mark.parametrize("name, data", [
        ('photo.jpeg', JPEG),
        ('photo.JPG', JPEG),
        ('scan.tif', TIFF),
    ])
    def test_extension_aliases_are_accepted(self, tmp_path, name, data):
        original = write(tmp_path / name, data)
        assert detect_and_rename_image_file(original) == original

    def test_short_file_is_read_without_error(self, tmp_path):
        original = write(tmp_path / 'tiny', b'\xff\xd8\xff')
        assert detect_and_rename_image_file(original) == original + '.jpg'

    def test_not_an_image_keeps_original_file(self, tmp_path):
        original = write(tmp_path / 'page', b'<html><body>404</body></html>')

        with pytest.raises(NotAnImageError) as exc_info:
            detect_and_rename_image_file(original)

        assert exc_info.value.file_path == original
        assert exc_info.value.content_type.startswith('text/html')
        assert os.path.exists(original)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageDetectionError):
            detect_and_rename_image_file(str(tmp_path / 'missing'))
