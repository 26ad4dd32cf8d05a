"""
字段提取：用 JSONPath 从数据源返回的 JSON 中取值。
"""

import logging
from functools import lru_cache
from typing import Any, List

from jsonpath_ng.ext import parse as jp_parse

logger = logging.getLogger(__name__)


@lru_cache(maxsize=128)
def _compile(expr: str):
    return jp_parse(expr)


def _cast_value(value: Any, type_hint: str) -> Any:
    """将提取的值按类型转换。"""
    if value is None:
        return None
    try:
        if type_hint == "int":
            return int(float(str(value)))
        elif type_hint == "float":
            return float(str(value))
        elif type_hint in ("object", "json", "list", "dict"):
            return value
        return str(value)
    except (ValueError, TypeError):
        logger.warning(f"类型转换失败: {value!r} -> {type_hint}")
        return value


def extract(data: Any, expr: str, type_hint: str = "str", default: Any = None) -> Any:
    """返回第一个匹配值；无匹配时返回 default。"""
    matches = _compile(expr).find(data)
    if not matches:
        logger.debug(f"JSONPath '{expr}' 无匹配")
        return default
    return _cast_value(matches[0].value, type_hint)


def extract_all(data: Any, expr: str, type_hint: str = "str") -> List[Any]:
    """返回全部匹配值（按文档顺序）。"""
    return [_cast_value(m.value, type_hint) for m in _compile(expr).find(data)]
