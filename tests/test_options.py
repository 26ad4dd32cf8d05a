import pytest

from devdash.options import (
    Color,
    ConfigValidationError,
    SizeResolutionError,
    color_name,
    map_color,
    map_size,
    resolve_bool,
    resolve_color,
    resolve_int,
    resolve_size,
)


# ── 尺寸 ──────────────────────────────────────────────

@pytest.mark.parametrize("token, expected", [
    ("XXS", 1), ("xs", 2), ("S", 4), ("m", 6), ("L", 8), ("xl", 10), ("XxL", 12),
])
def test_map_size_tshirt_sizes(token, expected):
    assert map_size(token) == expected


@pytest.mark.parametrize("token, expected", [
    ("7", 7), ("0x0a", 10), ("0o17", 15), ("017", 15), ("-3", -3), ("+5", 5),
])
def test_map_size_integers(token, expected):
    assert map_size(token) == expected


def test_map_size_invalid_token():
    with pytest.raises(SizeResolutionError) as exc_info:
        map_size("huge")
    assert exc_info.value.token == "huge"


# ── 颜色 ──────────────────────────────────────────────

def test_map_color_known_and_unknown():
    assert map_color("red") == Color.RED
    assert map_color("white") == Color.WHITE
    assert map_color("purple") == Color.DEFAULT
    # lookup is case-sensitive
    assert map_color("Red") == Color.DEFAULT


def test_color_name_reverse_lookup():
    assert color_name(Color.YELLOW) == "yellow"
    assert color_name(0) == "default"
    assert color_name(42) == ""


# ── 选项解析 ──────────────────────────────────────────

def test_resolve_color():
    options = {"border_color": "blue", "text_color": "nope"}
    assert resolve_color(options, "border_color") == Color.BLUE
    assert resolve_color(options, "text_color", Color.GREEN) == Color.DEFAULT
    assert resolve_color(options, "title_color", Color.GREEN) == Color.GREEN


def test_resolve_int():
    options = {"height": "12", "bar_gap": "notanint"}
    assert resolve_int(options, "height", 3) == 12
    assert resolve_int(options, "bar_gap", 5) == 0
    assert resolve_int(options, "bar_width", 6) == 6


@pytest.mark.parametrize("value", ["1", "t", "T", "TRUE", "true", "True"])
def test_resolve_bool_true_values(value):
    assert resolve_bool({"bold": value}, "bold", False) is True


@pytest.mark.parametrize("value", ["0", "f", "F", "FALSE", "false", "False"])
def test_resolve_bool_false_values(value):
    assert resolve_bool({"bold": value}, "bold", True) is False


def test_resolve_bool_default_and_error():
    assert resolve_bool({}, "bold", True) is True
    with pytest.raises(ConfigValidationError) as exc_info:
        resolve_bool({"bold": "yes"}, "bold", True)
    assert exc_info.value.key == "bold"
    assert exc_info.value.value == "yes"


def test_resolve_size():
    assert resolve_size({}, "size", "XXL") == 12
    assert resolve_size({"size": "m"}, "size", "XXL") == 6
    with pytest.raises(SizeResolutionError):
        resolve_size({"size": "big"}, "size", "XXL")


@pytest.mark.parametrize("token", ["default", "black", "red", "green", "yellow", "blue", "magenta", "cyan", "white"])
def test_color_name_round_trip(token):
    code = map_color(token)
    assert map_color(color_name(code)) == code
