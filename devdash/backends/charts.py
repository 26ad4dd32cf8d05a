"""
供 rich 使用的竖向柱状图。

柱子从底行向上生长，数值写在底行。图表不换行，超出面板宽度的部分直接裁掉。
"""

from typing import List, Sequence, Tuple

from rich.console import Console, ConsoleOptions, RenderResult
from rich.style import Style
from rich.text import Text

Cell = Tuple[str, Style]


def _scale(value: int, peak: int, rows: int) -> int:
    if value <= 0 or peak <= 0:
        return 0
    return max(1, min(rows, round(value / peak * rows)))


def _fit(text: str, width: int) -> str:
    return text[:width].center(width)


def _fill_style(color: str) -> Style:
    # 默认背景色不可见，用反色绘制
    if color == "default":
        return Style(reverse=True)
    return Style(bgcolor=color)


def _num_style(num_color: str, bar_color: str) -> Style:
    return Style(color=num_color) + _fill_style(bar_color)


def _lines(columns: List[List[Cell]], rows: int, width: int, gap: int) -> List[Text]:
    """columns[j] 为第 j 根柱子自下而上的单元格。"""
    lines = []
    for line in range(rows):
        level = rows - 1 - line
        text = Text(no_wrap=True, overflow="crop")
        for j, cells in enumerate(columns):
            if j:
                text.append(" " * gap)
            if level < len(cells):
                text.append(*cells[level])
            else:
                text.append(" " * width)
        lines.append(text)
    return lines


def _label_line(labels: Sequence[str], count: int, width: int, gap: int, style: Style) -> Text:
    text = Text(no_wrap=True, overflow="crop")
    for j in range(count):
        if j:
            text.append(" " * gap)
        label = labels[j] if j < len(labels) else ""
        text.append(_fit(label, width), style)
    return text


class BarChart:
    def __init__(
        self,
        values: Sequence[int],
        labels: Sequence[str],
        *,
        height: int,
        gap: int,
        bar_width: int,
        bar_color: str,
        num_color: str,
        empty_num_color: str,
        label_color: str,
    ):
        self.values = list(values)
        self.labels = list(labels)
        self.height = height
        self.gap = max(gap, 0)
        self.bar_width = max(bar_width, 1)
        self.bar_color = bar_color
        self.num_color = num_color
        self.empty_num_color = empty_num_color
        self.label_color = label_color

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        rows = max(self.height - 1, 1)
        peak = max(self.values, default=0)
        width = self.bar_width

        columns: List[List[Cell]] = []
        for value in self.values:
            filled = _scale(value, peak, rows)
            if filled == 0:
                columns.append([(_fit(str(value), width), Style(color=self.empty_num_color))])
                continue
            cells = [(_fit(str(value), width), _num_style(self.num_color, self.bar_color))]
            cells += [(" " * width, _fill_style(self.bar_color))] * (filled - 1)
            columns.append(cells)

        yield from _lines(columns, rows, width, self.gap)
        yield _label_line(self.labels, len(self.values), width, self.gap, Style(color=self.label_color))


class StackedBarChart:
    """series[i][j] 叠在 series[i-1][j] 之上。"""

    def __init__(
        self,
        series: Sequence[Sequence[int]],
        labels: Sequence[str],
        *,
        colors: Sequence[str],
        height: int,
        gap: int,
        bar_width: int,
        num_color: str,
        label_color: str,
    ):
        self.series = [list(s) for s in series]
        self.labels = list(labels)
        self.colors = list(colors)
        self.height = height
        self.gap = max(gap, 0)
        self.bar_width = max(bar_width, 1)
        self.num_color = num_color
        self.label_color = label_color

    def _value(self, i: int, j: int) -> int:
        return self.series[i][j] if j < len(self.series[i]) else 0

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        rows = max(self.height - 1, 1)
        width = self.bar_width
        bars = max([len(self.labels)] + [len(s) for s in self.series])
        totals = [sum(self._value(i, j) for i in range(len(self.series))) for j in range(bars)]
        peak = max(totals, default=0)

        columns: List[List[Cell]] = []
        for j in range(bars):
            cells: List[Cell] = []
            for i in range(len(self.series)):
                value = self._value(i, j)
                color = self.colors[i] if i < len(self.colors) else "default"
                segment = _scale(value, peak, rows)
                if segment == 0:
                    continue
                cells.append((_fit(str(value), width), _num_style(self.num_color, color)))
                cells += [(" " * width, _fill_style(color))] * (segment - 1)
            columns.append(cells[:rows])

        yield from _lines(columns, rows, width, self.gap)
        yield _label_line(self.labels, bars, width, self.gap, Style(color=self.label_color))
