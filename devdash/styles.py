"""
组件样式：把字符串选项 (Option Map) 解析为带默认值的强类型样式。
空的 Option Map 也总能得到可直接绘制的样式。
"""

from typing import List

from pydantic import BaseModel

from devdash.options import (
    OPTION_BAR_COLOR,
    OPTION_BAR_GAP,
    OPTION_BAR_WIDTH,
    OPTION_BOLD,
    OPTION_BORDER_COLOR,
    OPTION_EMPTY_NUM_COLOR,
    OPTION_FIRST_COLOR,
    OPTION_HEIGHT,
    OPTION_NUM_COLOR,
    OPTION_SECOND_COLOR,
    OPTION_SIZE,
    OPTION_TEXT_COLOR,
    OPTION_TITLE_COLOR,
    Color,
    OptionMap,
    resolve_bool,
    resolve_color,
    resolve_int,
    resolve_size,
)

TITLE_DEFAULT_SIZE = "XXL"

# 堆叠柱状图第 3 到第 8 个序列的颜色
STACK_PALETTE: List[Color] = [
    Color.BLUE,
    Color.MAGENTA,
    Color.CYAN,
    Color.RED,
    Color.WHITE,
    Color.BLACK,
]


class TitleStyle(BaseModel):
    text_color: Color = Color.DEFAULT
    border_color: Color = Color.DEFAULT
    bold: bool = True
    height: int = 3
    size: int = 12

    @classmethod
    def from_options(cls, options: OptionMap) -> "TitleStyle":
        """尺寸或 bold 无效时抛出 SizeResolutionError / ConfigValidationError。"""
        return cls(
            text_color=resolve_color(options, OPTION_TEXT_COLOR),
            border_color=resolve_color(options, OPTION_BORDER_COLOR),
            bold=resolve_bool(options, OPTION_BOLD, True),
            height=resolve_int(options, OPTION_HEIGHT, 3),
            size=resolve_size(options, OPTION_SIZE, TITLE_DEFAULT_SIZE),
        )


class TextBoxStyle(BaseModel):
    text_color: Color = Color.DEFAULT
    border_color: Color = Color.DEFAULT
    title_color: Color = Color.DEFAULT
    height: int = 3

    @classmethod
    def from_options(cls, options: OptionMap) -> "TextBoxStyle":
        return cls(
            text_color=resolve_color(options, OPTION_TEXT_COLOR),
            border_color=resolve_color(options, OPTION_BORDER_COLOR),
            title_color=resolve_color(options, OPTION_TITLE_COLOR),
            height=resolve_int(options, OPTION_HEIGHT, 3),
        )


class BarChartStyle(BaseModel):
    text_color: Color = Color.DEFAULT
    border_color: Color = Color.DEFAULT
    title_color: Color = Color.DEFAULT
    num_color: Color = Color.DEFAULT
    empty_num_color: Color = Color.DEFAULT
    bar_color: Color = Color.DEFAULT
    height: int = 10
    gap: int = 0
    bar_width: int = 6

    @classmethod
    def from_options(cls, options: OptionMap) -> "BarChartStyle":
        return cls(
            text_color=resolve_color(options, OPTION_TEXT_COLOR),
            border_color=resolve_color(options, OPTION_BORDER_COLOR),
            title_color=resolve_color(options, OPTION_TITLE_COLOR),
            num_color=resolve_color(options, OPTION_NUM_COLOR),
            empty_num_color=resolve_color(options, OPTION_EMPTY_NUM_COLOR),
            bar_color=resolve_color(options, OPTION_BAR_COLOR),
            height=resolve_int(options, OPTION_HEIGHT, 10),
            gap=resolve_int(options, OPTION_BAR_GAP, 0),
            bar_width=resolve_int(options, OPTION_BAR_WIDTH, 6),
        )


class StackedBarChartStyle(BaseModel):
    text_color: Color = Color.DEFAULT
    border_color: Color = Color.BLUE
    title_color: Color = Color.DEFAULT
    num_color: Color = Color.BLACK
    height: int = 10
    gap: int = 0
    bar_width: int = 6
    first_color: Color = Color.GREEN
    second_color: Color = Color.YELLOW

    @classmethod
    def from_options(cls, options: OptionMap) -> "StackedBarChartStyle":
        return cls(
            text_color=resolve_color(options, OPTION_TEXT_COLOR),
            border_color=resolve_color(options, OPTION_BORDER_COLOR, Color.BLUE),
            title_color=resolve_color(options, OPTION_TITLE_COLOR),
            num_color=resolve_color(options, OPTION_NUM_COLOR, Color.BLACK),
            height=resolve_int(options, OPTION_HEIGHT, 10),
            gap=resolve_int(options, OPTION_BAR_GAP, 0),
            bar_width=resolve_int(options, OPTION_BAR_WIDTH, 6),
            first_color=resolve_color(options, OPTION_FIRST_COLOR, Color.GREEN),
            second_color=resolve_color(options, OPTION_SECOND_COLOR, Color.YELLOW),
        )

    def series_colors(self, count: int) -> List[Color]:
        """每个序列一种颜色：前两个来自选项，其余取自调色板。"""
        colors = [self.first_color, self.second_color] + STACK_PALETTE
        return colors[:count]


class TableStyle(BaseModel):
    text_color: Color = Color.DEFAULT
    border_color: Color = Color.DEFAULT
    title_color: Color = Color.DEFAULT

    @classmethod
    def from_options(cls, options: OptionMap) -> "TableStyle":
        return cls(
            text_color=resolve_color(options, OPTION_TEXT_COLOR),
            border_color=resolve_color(options, OPTION_BORDER_COLOR),
            title_color=resolve_color(options, OPTION_TITLE_COLOR),
        )
