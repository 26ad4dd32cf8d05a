import pytest

from devdash.options import Color, ConfigValidationError, SizeResolutionError
from devdash.styles import StackedBarChartStyle
from devdash.tui import display_error, display_no_file
from devdash.widgets import BarChartData, StackedBarChartData, TableData, TextBoxData


# ── 默认样式 ──────────────────────────────────────────

def test_project_title_defaults(tui, manager):
    tui.add_project_title("My site", {})
    (kwargs,) = manager.draws("title")
    assert kwargs == {
        "title": "My site",
        "text_color": Color.DEFAULT,
        "border_color": Color.DEFAULT,
        "bold": True,
        "height": 3,
        "size": 12,
    }


def test_project_title_options(tui, manager):
    tui.add_project_title("My site", {"bold": "false", "size": "m", "text_color": "green"})
    (kwargs,) = manager.draws("title")
    assert kwargs["bold"] is False
    assert kwargs["size"] == 6
    assert kwargs["text_color"] == Color.GREEN


def test_project_title_bad_bold(tui, manager):
    with pytest.raises(ConfigValidationError):
        tui.add_project_title("My site", {"bold": "maybe"})
    assert manager.calls == []


def test_text_box_unparseable_height_is_zero(tui, manager):
    tui.add_text_box("42", " Stars ", {"height": "notanint"})
    (kwargs,) = manager.draws("text_box")
    assert kwargs["height"] == 0
    assert kwargs["data"] == "42"
    assert kwargs["title"] == " Stars "


def test_bar_chart_defaults(tui, manager):
    tui.add_bar_chart([1, 2, 3], ["a", "b", "c"], " Views ", {})
    (kwargs,) = manager.draws("bar_chart")
    assert kwargs["height"] == 10
    assert kwargs["gap"] == 0
    assert kwargs["bar_width"] == 6
    assert kwargs["bar_color"] == Color.DEFAULT
    assert kwargs["empty_num_color"] == Color.DEFAULT


def test_stacked_bar_chart_defaults(tui, manager):
    tui.add_stacked_bar_chart([[1, 2], [3, 4], [5, 6]], ["a", "b"], " Traffic ", None, {})
    (kwargs,) = manager.draws("stacked_bar_chart")
    assert kwargs["border_color"] == Color.BLUE
    assert kwargs["num_color"] == Color.BLACK
    assert kwargs["colors"] == [Color.GREEN, Color.YELLOW, Color.BLUE]


def test_stacked_bar_chart_explicit_colors(tui, manager):
    tui.add_stacked_bar_chart([[1], [2]], ["a"], " Traffic ", [Color.RED, Color.CYAN], {"first_color": "white"})
    (kwargs,) = manager.draws("stacked_bar_chart")
    assert kwargs["colors"] == [Color.RED, Color.CYAN]


def test_series_colors_from_options():
    style = StackedBarChartStyle.from_options({"first_color": "red", "second_color": "cyan"})
    assert style.series_colors(2) == [Color.RED, Color.CYAN]
    assert len(style.series_colors(8)) == 8


def test_table(tui, manager):
    tui.add_table([["Title", "Author"], ["Bug", "me"]], " Issues ", {"border_color": "red"})
    (kwargs,) = manager.draws("table")
    assert kwargs["border_color"] == Color.RED
    assert kwargs["data"][0] == ["Title", "Author"]


# ── 布局 ──────────────────────────────────────────────

def test_layout_calls_in_order(tui, manager):
    tui.add_row()
    tui.add_col("M")
    tui.add_text_box("a", " A ", {})
    tui.add_row()
    tui.add_col("L")
    tui.add_text_box("b", " B ", {})

    assert manager.names() == ["add_row", "add_col", "text_box", "add_row", "add_col", "text_box"]
    assert [kwargs["size"] for kwargs in manager.draws("add_col")] == [6, 8]


def test_two_rows_of_columns(tui, manager):
    tui.add_row()
    tui.add_col("m")
    tui.add_row()
    tui.add_col("l")

    assert manager.calls == [
        ("add_row", {}),
        ("add_col", {"size": 6}),
        ("add_row", {}),
        ("add_col", {"size": 8}),
    ]


def test_add_col_invalid_size(tui, manager):
    with pytest.raises(SizeResolutionError):
        tui.add_col("huge")
    assert manager.calls == []


# ── 分发 ──────────────────────────────────────────────

def test_draw_dispatches_payloads(tui, manager):
    tui.draw(TextBoxData(title=" T ", text="x"), {})
    tui.draw(BarChartData(title=" B ", values=[1], dimensions=["d"]), {})
    tui.draw(StackedBarChartData(title=" S ", series=[[1], [2]], dimensions=["d"]), {})
    tui.draw(TableData(title=" Tb ", rows=[["h"]]), {})
    assert manager.names() == ["text_box", "bar_chart", "stacked_bar_chart", "table"]


def test_draw_rejects_unknown_payload(tui):
    with pytest.raises(TypeError):
        tui.draw("not a widget", {})


# ── 会话 ──────────────────────────────────────────────

def test_close_is_idempotent(tui, manager):
    tui.close()
    tui.close()
    assert manager.closed == 1


def test_add_k_quit(tui, manager):
    tui.add_k_quit("C-q")
    assert manager.quit_key == "C-q"


def test_display_error(tui, manager):
    display_error(tui, ValueError("boom"))
    assert manager.names() == ["add_row", "add_col", "text_box", "render"]
    (kwargs,) = manager.draws("text_box")
    assert kwargs["data"] == "boom"
    assert kwargs["border_color"] == Color.RED
    assert kwargs["height"] == 5


def test_display_no_file(tui, manager):
    display_no_file(tui)
    (kwargs,) = manager.draws("text_box")
    assert "No configuration file" in kwargs["data"]
    assert manager.names()[-1] == "render"
