"""ChatGPT 反向代理网关"""

__version__ = "0.3.0"
