"""
Google Search Console 数据源：按页面 / 查询词统计点击与曝光。
"""

import datetime
import logging
from typing import Any, Dict
from urllib.parse import quote

import httpx

from devdash.config_loader import WidgetConfig
from devdash.extract import extract
from devdash.providers.base import (
    Capability,
    ProviderConstructionError,
    ProviderWidget,
    resolve_env,
    widget_days,
    widget_limit,
    widget_title,
)
from devdash.widgets import TableData

logger = logging.getLogger(__name__)

GSC_API = "https://www.googleapis.com/webmasters/v3"


class GscWidget(ProviderWidget):
    capability = Capability.SEARCH_CONSOLE
    widgets = {
        "gsc.table_pages": "table_pages",
        "gsc.table_queries": "table_queries",
    }

    def __init__(
        self,
        address: str,
        access_token: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(transport)
        if not address:
            raise ProviderConstructionError(self.name, "address is required")
        try:
            self.access_token = resolve_env(access_token) or ""
        except ValueError as e:
            raise ProviderConstructionError(self.name, str(e)) from e
        if not self.access_token:
            raise ProviderConstructionError(self.name, "access_token is required")
        self.address = address

    async def _query(self, body: Dict[str, Any]) -> Any:
        headers = {"Authorization": f"Bearer {self.access_token}"}
        site = quote(self.address, safe="")
        async with self._client(base_url=GSC_API, headers=headers) as client:
            response = await client.post(f"/sites/{site}/searchAnalytics/query", json=body)
            response.raise_for_status()
            return response.json()

    async def _table(self, widget: WidgetConfig, dimension: str, header: str, title: str) -> TableData:
        end = datetime.date.today()
        start = end - datetime.timedelta(days=widget_days(widget.options) - 1)
        report = await self._query({
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            "dimensions": [dimension],
            "rowLimit": widget_limit(widget.options),
        })
        rows = [[header, "Clicks", "Impressions"]]
        for row in report.get("rows", []):
            rows.append([
                extract(row, "$.keys[0]", default=""),
                str(extract(row, "$.clicks", "int", default=0)),
                str(extract(row, "$.impressions", "int", default=0)),
            ])
        return TableData(title=widget_title(widget.options, title), rows=rows)

    async def table_pages(self, widget: WidgetConfig) -> TableData:
        return await self._table(widget, "page", "Page", " Top pages ")

    async def table_queries(self, widget: WidgetConfig) -> TableData:
        return await self._table(widget, "query", "Query", " Top queries ")
