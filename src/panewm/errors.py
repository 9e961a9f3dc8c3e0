"""调用方错误

这些异常表示调用方传入了不存在的引用（未注册的 pane、空的最小化槽位），
属于程序错误，直接向上抛出。几何约束违规和被拒绝的状态流转不走异常。
"""


class PaneWMError(Exception):
    """panewm 异常基类"""


class PaneNotFoundError(PaneWMError, KeyError):
    """pane_id 未通过 register_pane 注册"""

    def __init__(self, pane_id: str):
        super().__init__(pane_id)
        self.pane_id = pane_id

    def __str__(self) -> str:
        return f"Unknown pane: {self.pane_id!r}"


class PaneExistsError(PaneWMError, ValueError):
    """重复注册同一个 pane_id"""

    def __init__(self, pane_id: str):
        super().__init__(f"Pane already registered: {pane_id!r}")
        self.pane_id = pane_id


class EmptySlotError(PaneWMError, IndexError):
    """最小化注册表槽位为空或越界"""

    def __init__(self, index: int):
        super().__init__(f"No minimized entry at index {index}")
        self.index = index
