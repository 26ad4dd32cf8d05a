"""
基于 rich 的终端渲染后端。

布局采用 12 单位栅格：每一行是固定高度的 Layout，列宽按单位数比例分配，
不足 12 的部分补空白。清屏 (clean) 只清空待绘制的栅格，直到下一次 render
才替换屏幕内容，因此刷新时不会闪屏。
"""

import logging
import os
import select
import sys
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from rich import box
from rich.console import Console, RenderableType
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from devdash.backends.charts import BarChart, StackedBarChart
from devdash.options import Color
from devdash.tui import BackendInitError

logger = logging.getLogger(__name__)

GRID_UNITS = 12

# Layout 对空 (falsy) 的内容会显示调试占位框，空白处必须用非空文本
BLANK = Text(" ")

RICH_COLORS = {
    Color.DEFAULT: "default",
    Color.BLACK: "black",
    Color.RED: "red",
    Color.GREEN: "green",
    Color.YELLOW: "yellow",
    Color.BLUE: "blue",
    Color.MAGENTA: "magenta",
    Color.CYAN: "cyan",
    Color.WHITE: "white",
}


def rich_color(code: int) -> str:
    try:
        return RICH_COLORS[Color(code)]
    except ValueError:
        return "default"


def parse_key(key: str) -> str:
    """
    配置中的按键 -> 终端读到的字符。
    支持 "C-<字母>" (控制键)、"esc" 以及单个字符。
    """
    lowered = key.lower()
    if len(lowered) == 3 and lowered.startswith("c-") and lowered[2].isalpha():
        return chr(ord(lowered[2]) - ord("a") + 1)
    if lowered in ("esc", "<escape>"):
        return "\x1b"
    if len(key) == 1:
        return key
    raise ValueError(f"unsupported key {key!r}")


@dataclass
class _Column:
    size: int
    items: List[Tuple[RenderableType, int]] = field(default_factory=list)

    @property
    def height(self) -> int:
        return sum(h for _, h in self.items)


@dataclass
class _Row:
    columns: List[_Column] = field(default_factory=list)

    @property
    def height(self) -> int:
        return max((col.height for col in self.columns), default=0)


class RichManager:
    """rich 实现的 Manager：绘制原语、栅格布局、按键循环。"""

    def __init__(self, console: Console | None = None, screen: bool = True):
        self.console = console or Console()
        if screen and not self.console.is_terminal:
            raise BackendInitError("devdash needs an interactive terminal")

        self._rows: List[_Row] = []
        self._current: Optional[Layout] = None
        self._lock = threading.RLock()
        self._quit = threading.Event()
        self._quit_keys: Set[str] = {parse_key("C-c")}

        self._live: Optional[Live] = Live(
            BLANK,
            console=self.console,
            screen=screen,
            auto_refresh=False,
            transient=False,
            redirect_stdout=False,
            redirect_stderr=False,
        )
        try:
            self._live.start()
        except Exception as e:
            self._live = None
            raise BackendInitError(f"can't start the terminal session: {e}") from e
        logger.debug(f"终端会话已启动: {self.console.size}")

    # ── 栅格 ──────────────────────────────────────────

    def add_row(self):
        self._rows.append(_Row())

    def add_col(self, size: int):
        if not self._rows:
            self.add_row()
        self._rows[-1].columns.append(_Column(size))

    def _place(self, renderable: RenderableType, height: int):
        """放入最近一列；没有行/列时自动补一个整行宽的列。"""
        if not self._rows or not self._rows[-1].columns:
            self.add_col(GRID_UNITS)
        self._rows[-1].columns[-1].items.append((renderable, max(height, 1)))

    # ── 绘制原语 ──────────────────────────────────────

    def title(self, title, text_color, border_color, bold, height, size):
        panel = Panel(
            Text(title, style=Style(color=rich_color(text_color), bold=bold)),
            border_style=Style(color=rich_color(border_color)),
            height=height,
        )
        self._rows.append(_Row([_Column(size, [(panel, max(height, 1))])]))

    def text_box(self, data, text_color, border_color, title, title_color, height):
        panel = Panel(
            Text(data, style=Style(color=rich_color(text_color))),
            title=Text(title, style=Style(color=rich_color(title_color))),
            title_align="left",
            border_style=Style(color=rich_color(border_color)),
            height=height,
        )
        self._place(panel, height)

    def bar_chart(
        self,
        data,
        dimensions,
        title,
        title_color,
        border_color,
        text_color,
        num_color,
        empty_num_color,
        height,
        gap,
        bar_width,
        bar_color,
    ):
        chart = BarChart(
            data,
            dimensions,
            height=height - 2,
            gap=gap,
            bar_width=bar_width,
            bar_color=rich_color(bar_color),
            num_color=rich_color(num_color),
            empty_num_color=rich_color(empty_num_color),
            label_color=rich_color(text_color),
        )
        self._place(self._chart_panel(chart, title, title_color, border_color, height), height)

    def stacked_bar_chart(
        self,
        data,
        dimensions,
        title,
        title_color,
        colors,
        border_color,
        text_color,
        num_color,
        height,
        gap,
        bar_width,
    ):
        chart = StackedBarChart(
            data,
            dimensions,
            colors=[rich_color(c) for c in colors],
            height=height - 2,
            gap=gap,
            bar_width=bar_width,
            num_color=rich_color(num_color),
            label_color=rich_color(text_color),
        )
        self._place(self._chart_panel(chart, title, title_color, border_color, height), height)

    @staticmethod
    def _chart_panel(chart, title, title_color, border_color, height) -> Panel:
        return Panel(
            chart,
            title=Text(title, style=Style(color=rich_color(title_color))),
            title_align="left",
            border_style=Style(color=rich_color(border_color)),
            height=height,
        )

    def table(self, data, title, title_color, border_color, text_color):
        fg = Style(color=rich_color(text_color))
        table = Table(
            box=box.SIMPLE_HEAD,
            show_edge=False,
            expand=True,
            header_style=fg + Style(bold=True),
            style=fg,
        )
        header = data[0] if data else []
        for name in header:
            table.add_column(name, style=fg, no_wrap=True, overflow="ellipsis")
        for row in data[1:]:
            table.add_row(*(list(row) + [""] * (len(header) - len(row)))[: len(header)])

        # header + separator + rows + panel border
        height = len(data) + 3 if data else 3
        panel = Panel(
            table,
            title=Text(title, style=Style(color=rich_color(title_color))),
            title_align="left",
            border_style=Style(color=rich_color(border_color)),
            height=height,
        )
        self._place(panel, height)

    # ── 渲染 ──────────────────────────────────────────

    def layout(self) -> Layout:
        """把当前栅格转换为 rich Layout。"""
        children = []
        for row in self._rows:
            height = row.height
            if height <= 0:
                continue
            columns = [self._column_layout(col, height) for col in row.columns]
            used = sum(max(col.size, 1) for col in row.columns)
            if used < GRID_UNITS:
                columns.append(Layout(BLANK, ratio=GRID_UNITS - used))
            row_layout = Layout(size=height)
            row_layout.split_row(*columns)
            children.append(row_layout)

        root = Layout(name="root")
        root.split_column(*children, Layout(BLANK, name="filler", ratio=1, minimum_size=0))
        return root

    @staticmethod
    def _column_layout(col: _Column, row_height: int) -> Layout:
        layout = Layout(ratio=max(col.size, 1))
        if not col.items:
            layout.update(BLANK)
            return layout
        parts = [Layout(renderable, size=height) for renderable, height in col.items]
        # 只有比本行最高列矮时才补空白，否则空白会占掉一行
        if col.height < row_height:
            parts.append(Layout(BLANK, ratio=1))
        layout.split_column(*parts)
        return layout

    def render(self):
        with self._lock:
            self._current = self.layout()
            if self._live is not None:
                self._live.update(self._current, refresh=True)

    def clean(self):
        self._rows = []

    def close(self):
        with self._lock:
            if self._live is None:
                return
            self._live.stop()
            self._live = None
            logger.debug("终端会话已关闭")

    # ── 按键 ──────────────────────────────────────────

    def k_quit(self, key: str):
        try:
            self._quit_keys = {parse_key(key)}
        except ValueError as e:
            logger.warning(f"{e}, falling back to C-c")
            self._quit_keys = {parse_key("C-c")}

    def request_quit(self):
        self._quit.set()

    def loop(self):
        """阻塞直到按下退出键 (或 Ctrl-C)，期间终端尺寸变化时重绘。"""
        self._quit.clear()
        try:
            if sys.stdin.isatty():
                self._read_keys()
            else:
                while not self._quit.wait(0.25):
                    pass
        except KeyboardInterrupt:
            logger.debug("收到中断信号，退出")

    def _read_keys(self):
        import termios
        import tty

        fd = sys.stdin.fileno()
        saved = termios.tcgetattr(fd)
        size = self.console.size
        try:
            tty.setcbreak(fd)
            while not self._quit.is_set():
                ready, _, _ = select.select([fd], [], [], 0.25)
                if ready:
                    key = os.read(fd, 1).decode(errors="ignore")
                    if key in self._quit_keys:
                        return
                if self.console.size != size:
                    size = self.console.size
                    self._redraw()
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)

    def _redraw(self):
        with self._lock:
            if self._live is not None and self._current is not None:
                self._live.refresh()
