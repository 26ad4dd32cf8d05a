"""
选项解析：将配置中的字符串选项 (Option Map) 解析为强类型的值。
包含尺寸映射 (t-shirt size -> 栅格单位) 与颜色映射 (颜色名 -> 颜色代码)。
"""

import logging
import re
from enum import IntEnum
from typing import Dict

logger = logging.getLogger(__name__)

OptionMap = Dict[str, str]


# ── 选项名 ──────────────────────────────────────────────

OPTION_SIZE = "size"

OPTION_BORDER_COLOR = "border_color"
OPTION_TEXT_COLOR = "text_color"
OPTION_TITLE_COLOR = "title_color"
OPTION_NUM_COLOR = "num_color"
OPTION_EMPTY_NUM_COLOR = "empty_num_color"

OPTION_BOLD = "bold"

OPTION_FIRST_COLOR = "first_color"
OPTION_SECOND_COLOR = "second_color"

OPTION_HEIGHT = "height"

OPTION_BAR_GAP = "bar_gap"
OPTION_BAR_WIDTH = "bar_width"
OPTION_BAR_COLOR = "bar_color"


# ── 异常 ──────────────────────────────────────────────

class ConfigValidationError(ValueError):
    """布尔类选项无法解析。"""

    def __init__(self, key: str, value: str):
        self.key = key
        self.value = value
        super().__init__(
            f"can't convert {value!r} (option '{key}') to bool - "
            "please verify your configuration (correct values: true or false)"
        )


class SizeResolutionError(ValueError):
    """尺寸既不是 t-shirt size 也不是整数。"""

    def __init__(self, token: str):
        self.token = token
        super().__init__(
            f"invalid size {token!r} - use one of XXS, XS, S, M, L, XL, XXL or an integer"
        )


# ── 颜色 ──────────────────────────────────────────────

class Color(IntEnum):
    DEFAULT = 0
    BLACK = 1
    RED = 2
    GREEN = 3
    YELLOW = 4
    BLUE = 5
    MAGENTA = 6
    CYAN = 7
    WHITE = 8


# map config color to ui color
COLOR_LOOKUP: Dict[str, Color] = {
    "default": Color.DEFAULT,
    "black": Color.BLACK,
    "red": Color.RED,
    "green": Color.GREEN,
    "yellow": Color.YELLOW,
    "blue": Color.BLUE,
    "magenta": Color.MAGENTA,
    "cyan": Color.CYAN,
    "white": Color.WHITE,
}


def map_color(token: str) -> Color:
    """颜色名 -> 颜色代码。未知颜色一律返回默认色，不报错。"""
    return COLOR_LOOKUP.get(token, Color.DEFAULT)


def color_name(code: int) -> str:
    """颜色代码 -> 颜色名，仅用于诊断输出。"""
    for name, value in COLOR_LOOKUP.items():
        if value == code:
            return name
    return ""


# ── 尺寸 ──────────────────────────────────────────────

# map config size to ui size
SIZE_LOOKUP: Dict[str, int] = {
    "xxs": 1,
    "xs": 2,
    "s": 4,
    "m": 6,
    "l": 8,
    "xl": 10,
    "xxl": 12,
}

_LEGACY_OCTAL = re.compile(r"^[+-]?0[0-7_]+$")


def parse_int(value: str) -> int:
    """
    解析整数字符串，支持 0x / 0o / 0b 前缀以及旧式的前导 0 八进制 (如 "017")。
    解析失败时抛出 ValueError。
    """
    try:
        return int(value, 0)
    except ValueError:
        if _LEGACY_OCTAL.match(value):
            return int(value, 8)
        raise


def map_size(token: str) -> int:
    """
    Map the size of a column if a t-shirt size is provided (XXS to XXL).
    Otherwise use the value provided in the config directly.
    """
    size = SIZE_LOOKUP.get(token.lower())
    if size is not None:
        return size
    try:
        return parse_int(token)
    except ValueError:
        raise SizeResolutionError(token) from None


# ── 选项解析 ──────────────────────────────────────────

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


def resolve_color(options: OptionMap, key: str, default: Color = Color.DEFAULT) -> Color:
    if key not in options:
        return default
    return map_color(options[key])


def resolve_int(options: OptionMap, key: str, default: int) -> int:
    """缺失时返回默认值；无法解析时返回 0 (兼容已有配置)。"""
    if key not in options:
        return default
    try:
        return parse_int(options[key])
    except ValueError:
        logger.debug(f"选项 '{key}' 的值 {options[key]!r} 不是整数，按 0 处理")
        return 0


def resolve_bool(options: OptionMap, key: str, default: bool) -> bool:
    if key not in options:
        return default
    value = options[key]
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigValidationError(key, value)


def resolve_size(options: OptionMap, key: str, default_token: str) -> int:
    """尺寸选项：缺失时使用调用方提供的默认 token，无效 token 抛出 SizeResolutionError。"""
    return map_size(options.get(key, default_token))
