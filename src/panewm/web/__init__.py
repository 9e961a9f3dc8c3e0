"""Web 服务模块"""

from panewm.web.app import create_app
from panewm.web.server import WebServer

__all__ = ["create_app", "WebServer"]
