"""
Monitor 数据源：检查站点是否在线以及响应时间。
"""

import logging
import time

import httpx

from devdash.config_loader import WidgetConfig
from devdash.providers.base import (
    Capability,
    ProviderConstructionError,
    ProviderWidget,
    widget_title,
)
from devdash.widgets import TextBoxData

logger = logging.getLogger(__name__)


class MonitorWidget(ProviderWidget):
    capability = Capability.MONITOR
    widgets = {
        "mon.box_availability": "box_availability",
        "mon.box_response_time": "box_response_time",
    }

    def __init__(self, address: str, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__(transport)
        try:
            url = httpx.URL(address)
        except httpx.InvalidURL as e:
            raise ProviderConstructionError(self.name, f"invalid address {address!r}: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ProviderConstructionError(
                self.name, f"invalid address {address!r} - expected http(s)://host"
            )
        self.address = str(url)

    async def _get(self) -> httpx.Response:
        async with self._client(follow_redirects=True) as client:
            return await client.get(self.address)

    async def box_availability(self, widget: WidgetConfig) -> TextBoxData:
        title = widget_title(widget.options, " Availability ")
        try:
            response = await self._get()
        except httpx.TransportError as e:
            logger.info(f"[{self.name}] {self.address} unreachable: {e}")
            return TextBoxData(title=title, text="offline (unreachable)")

        if response.status_code < 400:
            return TextBoxData(title=title, text="online")
        return TextBoxData(title=title, text=f"offline ({response.status_code})")

    async def box_response_time(self, widget: WidgetConfig) -> TextBoxData:
        start = time.perf_counter()
        await self._get()
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        return TextBoxData(
            title=widget_title(widget.options, " Response time "),
            text=f"{elapsed_ms} ms",
        )
