"""
数据源基础设施：能力枚举、凭证解析、组件分发。
"""

import logging
import os
import re
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from devdash.config_loader import WidgetConfig
from devdash.options import OptionMap, resolve_int
from devdash.widgets import WidgetData

logger = logging.getLogger(__name__)

DEFAULT_DAYS = 7
DEFAULT_LIMIT = 5


class Capability(str, Enum):
    """项目可绑定的集成，顺序即每轮刷新时的调用顺序。值为组件名前缀。"""
    ANALYTICS = "ga"
    SEARCH_CONSOLE = "gsc"
    MONITOR = "mon"
    ISSUE_TRACKER = "github"

    @classmethod
    def for_widget(cls, widget: WidgetConfig) -> Optional["Capability"]:
        try:
            return cls(widget.prefix)
        except ValueError:
            return None


# ── 异常 ──────────────────────────────────────────────

class ProviderConstructionError(Exception):
    """凭证或地址无效，无法创建数据源。"""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"{provider}: {message}")


class UnknownWidgetError(ValueError):
    def __init__(self, provider: str, name: str):
        self.provider = provider
        self.name = name
        super().__init__(f"{provider}: unknown widget '{name}'")


# ── 凭证 ──────────────────────────────────────────────

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


def resolve_env(value: str | None) -> str | None:
    """解析 ${ENV_VAR} 占位符为环境变量值。"""
    if value is None:
        return None

    def replacer(m: re.Match) -> str:
        env_val = os.getenv(m.group(1), "")
        if not env_val:
            raise ValueError(f"环境变量 {m.group(1)} 未设置")
        return env_val

    return _ENV_PATTERN.sub(replacer, value)


# ── 基类 ──────────────────────────────────────────────

Handler = Callable[[WidgetConfig], Awaitable[WidgetData]]


class ProviderWidget:
    """
    一个集成的数据源。子类在 `widgets` 中声明 组件名 -> 方法名，
    方法接收 WidgetConfig，返回可直接绘制的 WidgetData。
    """

    capability: Capability
    widgets: Dict[str, str] = {}

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    @property
    def name(self) -> str:
        return self.capability.name.lower()

    def _client(self, **kwargs: Any) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, **kwargs)

    def handler(self, widget: WidgetConfig) -> Handler:
        method = self.widgets.get(widget.name)
        if method is None:
            raise UnknownWidgetError(self.name, widget.name)
        return getattr(self, method)

    async def fetch(self, widget: WidgetConfig) -> WidgetData:
        handler = self.handler(widget)
        logger.debug(f"[{self.name}] fetching {widget.name}")
        return await handler(widget)


def widget_title(options: OptionMap, default: str) -> str:
    return options.get("title", default)


def widget_days(options: OptionMap) -> int:
    return max(resolve_int(options, "days", DEFAULT_DAYS), 1)


def widget_limit(options: OptionMap) -> int:
    return max(resolve_int(options, "limit", DEFAULT_LIMIT), 1)
