#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Device MCP - Python包发布配置

安装：
    pip install -e .
    pip install -e ".[ios,test]"

发布到PyPI：
    python -m build
    twine upload dist/*
"""
from setuptools import setup, find_packages
from pathlib import Path

# 读取README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding='utf-8') if readme_file.exists() else ""

# 读取requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    with open(requirements_file, 'r', encoding='utf-8') as f:
        requirements = [
            line.strip()
            for line in f
            if line.strip() and not line.startswith('#')
        ]

setup(
    name="mobile-device-mcp",
    version="1.0.0",
    description="移动设备 MCP 工具 - 设备列表/选择、录屏、相册图片推送与清理，支持Android和iOS",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "ios": [
            "tidevice>=0.12.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
        "all": [
            "tidevice>=0.12.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "device-mcp=device_mcp.mcp_tools.mcp_server:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Testing",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    keywords="mobile automation android ios mcp screenrecord adb scrcpy",
)
