"""
终端 UI 抽象层：与具体渲染后端解耦。
Tui 负责把 Option Map 解析为强类型样式，再调用后端的绘制原语。
"""

import logging
import threading
from typing import List, Optional, Protocol, Sequence

from devdash.options import Color, OptionMap, map_size
from devdash.styles import (
    BarChartStyle,
    StackedBarChartStyle,
    TableStyle,
    TextBoxStyle,
    TitleStyle,
)
from devdash.widgets import (
    BarChartData,
    StackedBarChartData,
    TableData,
    TextBoxData,
)

logger = logging.getLogger(__name__)


class BackendInitError(RuntimeError):
    """终端会话无法启动。"""


# ── 后端接口 ──────────────────────────────────────────

class Renderer(Protocol):
    def render(self) -> None: ...

    def close(self) -> None: ...

    def clean(self) -> None: ...


class Drawer(Protocol):
    def title(
        self,
        title: str,
        text_color: Color,
        border_color: Color,
        bold: bool,
        height: int,
        size: int,
    ) -> None: ...

    def text_box(
        self,
        data: str,
        text_color: Color,
        border_color: Color,
        title: str,
        title_color: Color,
        height: int,
    ) -> None: ...

    def bar_chart(
        self,
        data: List[int],
        dimensions: List[str],
        title: str,
        title_color: Color,
        border_color: Color,
        text_color: Color,
        num_color: Color,
        empty_num_color: Color,
        height: int,
        gap: int,
        bar_width: int,
        bar_color: Color,
    ) -> None: ...

    def stacked_bar_chart(
        self,
        data: List[List[int]],
        dimensions: List[str],
        title: str,
        title_color: Color,
        colors: List[Color],
        border_color: Color,
        text_color: Color,
        num_color: Color,
        height: int,
        gap: int,
        bar_width: int,
    ) -> None: ...

    def table(
        self,
        data: List[List[str]],
        title: str,
        title_color: Color,
        border_color: Color,
        text_color: Color,
    ) -> None: ...

    def add_col(self, size: int) -> None: ...

    def add_row(self) -> None: ...


class KeyManager(Protocol):
    def k_quit(self, key: str) -> None: ...


class Looper(Protocol):
    def loop(self) -> None: ...


class Manager(KeyManager, Renderer, Drawer, Looper, Protocol):
    """具体渲染后端需要实现的全部原语。"""


# ── Façade ────────────────────────────────────────────

class Tui:
    """
    渲染后端之上的组件门面。

    每个 add_* 方法把选项解析为强类型样式，并且只调用一次后端绘制原语。
    清屏并整体重绘的调用方需要全程持有 `lock`。
    """

    def __init__(self, instance: Manager):
        self.instance = instance
        self.lock = threading.RLock()
        self._closed = False

    # ── 布局 ──────────────────────────────────────────

    def add_row(self):
        self.instance.add_row()

    def add_col(self, size: str):
        """尺寸 token 无法解析时抛出 SizeResolutionError。"""
        self.instance.add_col(map_size(size))

    # ── 组件 ──────────────────────────────────────────

    def add_project_title(self, title: str, options: OptionMap):
        style = TitleStyle.from_options(options)
        self.instance.title(
            title=title,
            text_color=style.text_color,
            border_color=style.border_color,
            bold=style.bold,
            height=style.height,
            size=style.size,
        )

    def add_text_box(self, data: str, title: str, options: OptionMap):
        style = TextBoxStyle.from_options(options)
        self.instance.text_box(
            data=data,
            text_color=style.text_color,
            border_color=style.border_color,
            title=title,
            title_color=style.title_color,
            height=style.height,
        )

    def add_bar_chart(
        self,
        data: List[int],
        dimensions: List[str],
        title: str,
        options: OptionMap,
    ):
        style = BarChartStyle.from_options(options)
        self.instance.bar_chart(
            data=data,
            dimensions=dimensions,
            title=title,
            title_color=style.title_color,
            border_color=style.border_color,
            text_color=style.text_color,
            num_color=style.num_color,
            empty_num_color=style.empty_num_color,
            height=style.height,
            gap=style.gap,
            bar_width=style.bar_width,
            bar_color=style.bar_color,
        )

    def add_stacked_bar_chart(
        self,
        data: List[List[int]],
        dimensions: List[str],
        title: str,
        colors: Optional[Sequence[Color]],
        options: OptionMap,
    ):
        style = StackedBarChartStyle.from_options(options)
        if colors is None:
            colors = style.series_colors(len(data))
        self.instance.stacked_bar_chart(
            data=data,
            dimensions=dimensions,
            title=title,
            title_color=style.title_color,
            colors=list(colors),
            border_color=style.border_color,
            text_color=style.text_color,
            num_color=style.num_color,
            height=style.height,
            gap=style.gap,
            bar_width=style.bar_width,
        )

    def add_table(self, data: List[List[str]], title: str, options: OptionMap):
        style = TableStyle.from_options(options)
        self.instance.table(
            data=data,
            title=title,
            title_color=style.title_color,
            border_color=style.border_color,
            text_color=style.text_color,
        )

    def draw(self, data, options: OptionMap):
        """根据 payload 类型分发到对应的 add_* 方法。"""
        if isinstance(data, TextBoxData):
            self.add_text_box(data.text, data.title, options)
        elif isinstance(data, BarChartData):
            self.add_bar_chart(data.values, data.dimensions, data.title, options)
        elif isinstance(data, StackedBarChartData):
            self.add_stacked_bar_chart(data.series, data.dimensions, data.title, data.colors, options)
        elif isinstance(data, TableData):
            self.add_table(data.rows, data.title, options)
        else:
            raise TypeError(f"unsupported widget data: {type(data).__name__}")

    # ── 会话 ──────────────────────────────────────────

    def add_k_quit(self, key: str):
        self.instance.k_quit(key)

    def render(self):
        self.instance.render()

    def clean(self):
        self.instance.clean()

    def loop(self):
        self.instance.loop()

    def close(self):
        """只关闭一次后端会话。"""
        if self._closed:
            return
        self._closed = True
        self.instance.close()


# ── 提示面板 ──────────────────────────────────────────

_ERROR_OPTIONS: OptionMap = {
    "border_color": "red",
    "title_color": "red",
    "height": "5",
}

_NO_FILE_TEXT = (
    "No configuration file found.\n"
    "Create a .devdash.yml in the current directory or pass -config <path>.\n"
    "Press C-c to quit."
)


def display_error(tui: Tui, err: Exception):
    """在屏幕上显示错误面板，替代直接崩溃。"""
    logger.error(f"显示错误面板: {err}")
    with tui.lock:
        tui.add_row()
        tui.add_col("XXL")
        tui.add_text_box(str(err), " Error ", _ERROR_OPTIONS)
        tui.render()


def display_no_file(tui: Tui):
    with tui.lock:
        tui.add_row()
        tui.add_col("XXL")
        tui.add_text_box(_NO_FILE_TEXT, " Welcome to devdash ", {"height": "6", "border_color": "yellow"})
        tui.render()
