"""
组件数据：数据源返回的、可直接绘制的 payload。
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from devdash.options import Color

MAX_STACKED_SERIES = 8


class TextBoxData(BaseModel):
    kind: Literal["text_box"] = "text_box"
    title: str = ""
    text: str = ""


class BarChartData(BaseModel):
    kind: Literal["bar_chart"] = "bar_chart"
    title: str = ""
    values: List[int] = Field(default_factory=list)
    dimensions: List[str] = Field(default_factory=list)


class StackedBarChartData(BaseModel):
    """最多 8 个序列，series[i][j] 为第 j 根柱子的第 i 段。"""
    kind: Literal["stacked_bar_chart"] = "stacked_bar_chart"
    title: str = ""
    series: List[List[int]] = Field(default_factory=list, max_length=MAX_STACKED_SERIES)
    dimensions: List[str] = Field(default_factory=list)
    colors: Optional[List[Color]] = None


class TableData(BaseModel):
    """rows[0] 为表头。"""
    kind: Literal["table"] = "table"
    title: str = ""
    rows: List[List[str]] = Field(default_factory=list)


WidgetData = Annotated[
    Union[TextBoxData, BarChartData, StackedBarChartData, TableData],
    Field(discriminator="kind"),
]

widget_data_adapter = TypeAdapter(WidgetData)
