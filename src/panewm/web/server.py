"""Web 服务器

REST 接口对应 WindowManager 的生命周期钩子，WebSocket 接收 pointer 事件；
每次变化后把布局快照广播给所有客户端。
"""

import logging

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from panewm.errors import EmptySlotError, PaneExistsError, PaneNotFoundError
from panewm.geometry import Rect
from panewm.manager import WindowManager
from panewm.pane import Capability
from panewm.web.handlers import MessageHandler

logger = logging.getLogger(__name__)


class RectModel(BaseModel):
    """矩形（x/y 为外框偏移，width/height 为内容尺寸）"""

    x: int = 0
    y: int = 0
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)


class RegisterPaneRequest(BaseModel):
    """注册 pane 请求体"""

    pane_id: str = Field(min_length=1)
    title: str = ""
    capabilities: list[str] | None = None  # None 表示全部启用
    rect: RectModel | None = None
    min_max_icons: bool = True
    min_double_click: bool = True
    close_icon: bool = True


class ViewportRequest(BaseModel):
    """视口变化请求体"""

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    minimize_area_width: int | None = Field(default=None, gt=0)


class ActionResponse(BaseModel):
    """生命周期操作响应"""

    success: bool
    pane_id: str
    state: str


class WebServer:
    """HTTP + WebSocket 服务器"""

    def __init__(self, manager: WindowManager):
        self.app = FastAPI(title="PaneWM")
        self.manager = manager
        self.clients: list[WebSocket] = []
        self._dirty = False

        self._handler = MessageHandler(manager=manager, flush=self.flush)

        self._setup_error_handlers()
        self._setup_routes()
        manager.set_on_change(self._on_change)

    def _on_change(self, reason: str, pane_id: str | None):
        """布局变化回调（同步），实际广播在 flush 中进行"""
        self._dirty = True

    def layout_message(self) -> dict:
        return {"type": "layout", "layout": self.manager.to_dict()}

    async def flush(self):
        """有变化时广播布局"""
        if not self._dirty:
            return
        self._dirty = False
        await self.broadcast(self.layout_message())

    def _setup_error_handlers(self):
        @self.app.exception_handler(PaneNotFoundError)
        async def pane_not_found(request: Request, exc: PaneNotFoundError):
            return JSONResponse(status_code=404, content={"detail": str(exc)})

        @self.app.exception_handler(EmptySlotError)
        async def empty_slot(request: Request, exc: EmptySlotError):
            return JSONResponse(status_code=409, content={"detail": str(exc)})

        @self.app.exception_handler(PaneExistsError)
        async def pane_exists(request: Request, exc: PaneExistsError):
            return JSONResponse(status_code=409, content={"detail": str(exc)})

    def _action_response(self, success: bool, pane_id: str) -> ActionResponse:
        pane = self.manager.get_pane(pane_id)
        return ActionResponse(success=success, pane_id=pane_id, state=pane.state.value)

    def _setup_routes(self):
        @self.app.get("/api/layout")
        async def get_layout():
            """获取布局快照"""
            return self.manager.to_dict()

        @self.app.post("/api/panes")
        async def register_pane(request: RegisterPaneRequest):
            """注册 pane"""
            capabilities = None
            if request.capabilities is not None:
                try:
                    capabilities = Capability.from_names(request.capabilities)
                except KeyError as e:
                    raise HTTPException(status_code=422, detail=f"Unknown capability: {e}")

            rect = None
            if request.rect is not None:
                rect = Rect(**request.rect.model_dump())

            pane = self.manager.register_pane(
                request.pane_id,
                capabilities=capabilities,
                initial_rect=rect,
                title=request.title,
                min_max_icons=request.min_max_icons,
                min_double_click=request.min_double_click,
                close_icon=request.close_icon,
            )
            await self.flush()
            return pane.to_dict()

        @self.app.post("/api/panes/{pane_id}/minimize", response_model=ActionResponse)
        async def minimize_pane(pane_id: str):
            success = self.manager.on_minimize_requested(pane_id)
            await self.flush()
            return self._action_response(success, pane_id)

        @self.app.post("/api/panes/{pane_id}/maximize", response_model=ActionResponse)
        async def maximize_pane(pane_id: str):
            """最大化 / 还原（切换）"""
            success = self.manager.on_maximize_requested(pane_id)
            await self.flush()
            return self._action_response(success, pane_id)

        @self.app.post("/api/panes/{pane_id}/restore", response_model=ActionResponse)
        async def restore_pane(pane_id: str):
            success = self.manager.on_restore_requested_for_pane(pane_id)
            await self.flush()
            return self._action_response(success, pane_id)

        @self.app.post("/api/panes/{pane_id}/close", response_model=ActionResponse)
        async def close_pane(pane_id: str):
            success = self.manager.on_close_requested(pane_id)
            await self.flush()
            return self._action_response(success, pane_id)

        @self.app.post("/api/minimized/{index}/restore")
        async def restore_minimized(index: int):
            """点击最小化条目"""
            pane = self.manager.on_restore_requested(index)
            await self.flush()
            return pane.to_dict()

        @self.app.post("/api/viewport")
        async def resize_viewport(request: ViewportRequest):
            """视口尺寸变化"""
            contained = self.manager.on_viewport_resized(
                request.width,
                request.height,
                minimize_area_width=request.minimize_area_width,
            )
            await self.flush()
            return {"contained": contained, "layout": self.manager.to_dict()}

        @self.app.websocket("/ws")
        async def websocket_endpoint(websocket: WebSocket):
            await websocket.accept()
            self.clients.append(websocket)
            try:
                await websocket.send_json(self.layout_message())
                while True:
                    data = await websocket.receive_text()
                    await self._handler.handle(websocket, data)
            except WebSocketDisconnect:
                pass
            finally:
                if websocket in self.clients:
                    self.clients.remove(websocket)

    async def broadcast(self, data: dict):
        """广播消息给所有客户端"""
        for client in list(self.clients):
            try:
                await client.send_json(data)
            except Exception as e:
                logger.debug(f"[WebServer] Dropping client after send failure: {e}")
                if client in self.clients:
                    self.clients.remove(client)
