"""WebSocket 消息处理器

宿主页面把进程级 pointer 事件通过 WebSocket 转发过来：

    {"action": "pointer_down", "pane_id": "...", "x": 10, "y": 20, "handle": "drag", "button": 1}
    {"action": "pointer_move", "x": 12, "y": 25}
    {"action": "pointer_up"}
    {"action": "toggle_dropdown"}
"""

import json
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from fastapi import WebSocket

from panewm.errors import PaneWMError
from panewm.geometry import Point
from panewm.manager import WindowManager

logger = logging.getLogger(__name__)


@dataclass
class MessageHandler:
    """WebSocket 消息处理器"""

    manager: WindowManager
    flush: Callable[[], Awaitable[None]]

    async def handle(self, websocket: WebSocket, data: str):
        """处理 WebSocket 消息"""
        try:
            msg = json.loads(data)
        except json.JSONDecodeError:
            await self._send_error(websocket, "invalid json")
            return

        if not isinstance(msg, dict):
            await self._send_error(websocket, "message must be an object")
            return

        action = msg.get("action")
        try:
            if action == "pointer_down":
                await self._handle_pointer_down(websocket, msg)
            elif action == "pointer_move":
                self.manager.on_pointer_move(_point(msg))
            elif action == "pointer_up":
                self.manager.on_pointer_up()
            elif action == "toggle_dropdown":
                is_open = self.manager.toggle_minimized_dropdown()
                await websocket.send_json({"type": "dropdown_result", "open": is_open})
            else:
                await self._send_error(websocket, f"unknown action: {action}")
                return
        except (PaneWMError, KeyError, ValueError, TypeError) as e:
            logger.debug(f"[MessageHandler] {action} failed: {e}")
            await self._send_error(websocket, str(e), action=action)
            return

        await self.flush()

    async def _handle_pointer_down(self, websocket: WebSocket, msg: dict):
        """处理 pane 上的 pointer-down（点击提到最前层，拖把手/锚点开始会话）"""
        pane_id = msg["pane_id"]
        started = self.manager.on_pointer_down(
            pane_id,
            _point(msg),
            handle=msg.get("handle"),
            button=int(msg.get("button", 1)),
        )
        await websocket.send_json({
            "type": "pointer_down_result",
            "pane_id": pane_id,
            "session": started,
        })

    async def _send_error(self, websocket: WebSocket, message: str, action: str | None = None):
        await websocket.send_json({"type": "error", "action": action, "message": message})


def _point(msg: dict) -> Point:
    return Point(x=int(msg["x"]), y=int(msg["y"]))
