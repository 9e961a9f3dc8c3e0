"""FastAPI 应用初始化"""

import logging

import uvicorn

from panewm import config
from panewm.manager import WindowManager
from panewm.overflow import ItemMeasurer
from panewm.telemetry import setup_logging
from panewm.web.server import WebServer

logger = logging.getLogger(__name__)


def create_app(
    viewport_width: int = config.DEFAULT_VIEWPORT_WIDTH,
    viewport_height: int = config.DEFAULT_VIEWPORT_HEIGHT,
    minimize_area_width: int | None = None,
    measure_item: ItemMeasurer | None = None,
) -> WebServer:
    """创建 Web 应用"""
    manager = WindowManager(
        viewport_width,
        viewport_height,
        minimize_area_width=minimize_area_width,
        measure_item=measure_item,
    )
    return WebServer(manager)


def main():
    """入口函数"""
    setup_logging(config.LOG_LEVEL)
    server = create_app()

    logger.info(
        f"[WebServer] Viewport {config.DEFAULT_VIEWPORT_WIDTH}x{config.DEFAULT_VIEWPORT_HEIGHT}"
    )
    print(f"PaneWM Web Server starting at http://{config.WEB_HOST}:{config.WEB_PORT}")

    try:
        uvicorn.run(
            server.app,
            host=config.WEB_HOST,
            port=config.WEB_PORT,
            log_level=config.LOG_LEVEL.lower(),
        )
    except KeyboardInterrupt:
        print("\nServer stopped")
