"""
MCP 协议服务
"""
