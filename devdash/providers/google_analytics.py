"""
Google Analytics 数据源 (GA4 Data API)。
使用 OAuth access token 调用 REST 接口，token 支持 ${ENV_VAR}。
"""

import logging
from typing import Any, Dict, List, Tuple

import httpx

from devdash.config_loader import WidgetConfig
from devdash.extract import extract, extract_all
from devdash.providers.base import (
    Capability,
    ProviderConstructionError,
    ProviderWidget,
    resolve_env,
    widget_days,
    widget_limit,
    widget_title,
)
from devdash.widgets import BarChartData, StackedBarChartData, TableData, TextBoxData

logger = logging.getLogger(__name__)

GA_DATA_API = "https://analyticsdata.googleapis.com/v1beta"


def _ga_date(value: str) -> str:
    # "20240503" -> "05-03"
    return f"{value[4:6]}-{value[6:8]}" if len(value) == 8 else value


class GaWidget(ProviderWidget):
    capability = Capability.ANALYTICS
    widgets = {
        "ga.box_real_time": "box_real_time",
        "ga.bar_sessions": "bar_sessions",
        "ga.bar_users": "bar_users",
        "ga.table_pages": "table_pages",
        "ga.stacked_bar_new_returning": "stacked_bar_new_returning",
    }

    def __init__(
        self,
        property_id: str,
        access_token: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(transport)
        if not property_id:
            raise ProviderConstructionError(self.name, "property_id is required")
        try:
            self.access_token = resolve_env(access_token) or ""
        except ValueError as e:
            raise ProviderConstructionError(self.name, str(e)) from e
        if not self.access_token:
            raise ProviderConstructionError(self.name, "access_token is required")
        self.property_id = property_id

    async def _post(self, method: str, body: Dict[str, Any]) -> Any:
        headers = {"Authorization": f"Bearer {self.access_token}"}
        async with self._client(base_url=GA_DATA_API, headers=headers) as client:
            response = await client.post(f"/properties/{self.property_id}:{method}", json=body)
            response.raise_for_status()
            return response.json()

    async def _daily(self, metrics: List[str], days: int, extra_dimensions: List[str] | None = None) -> Any:
        dimensions = [{"name": "date"}] + [{"name": d} for d in extra_dimensions or []]
        return await self._post("runReport", {
            "dateRanges": [{"startDate": f"{days - 1}daysAgo", "endDate": "today"}],
            "dimensions": dimensions,
            "metrics": [{"name": m} for m in metrics],
            "orderBys": [{"dimension": {"dimensionName": "date"}}],
        })

    async def _daily_metric(self, widget: WidgetConfig, metric: str, title: str) -> BarChartData:
        report = await self._daily([metric], widget_days(widget.options))
        return BarChartData(
            title=widget_title(widget.options, title),
            values=extract_all(report, "$.rows[*].metricValues[0].value", "int"),
            dimensions=[_ga_date(d) for d in extract_all(report, "$.rows[*].dimensionValues[0].value")],
        )

    # ── 组件 ──────────────────────────────────────────

    async def box_real_time(self, widget: WidgetConfig) -> TextBoxData:
        report = await self._post("runRealtimeReport", {"metrics": [{"name": "activeUsers"}]})
        users = extract(report, "$.rows[0].metricValues[0].value", "int", default=0)
        return TextBoxData(title=widget_title(widget.options, " Real time users "), text=str(users))

    async def bar_sessions(self, widget: WidgetConfig) -> BarChartData:
        return await self._daily_metric(widget, "sessions", " Sessions ")

    async def bar_users(self, widget: WidgetConfig) -> BarChartData:
        return await self._daily_metric(widget, "activeUsers", " Users ")

    async def table_pages(self, widget: WidgetConfig) -> TableData:
        limit = widget_limit(widget.options)
        report = await self._post("runReport", {
            "dateRanges": [{"startDate": f"{widget_days(widget.options) - 1}daysAgo", "endDate": "today"}],
            "dimensions": [{"name": "pagePath"}],
            "metrics": [{"name": "screenPageViews"}],
            "orderBys": [{"metric": {"metricName": "screenPageViews"}, "desc": True}],
            "limit": limit,
        })
        pages = extract_all(report, "$.rows[*].dimensionValues[0].value")
        views = extract_all(report, "$.rows[*].metricValues[0].value")
        rows = [["Page", "Views"]] + [[p, v] for p, v in zip(pages, views)]
        return TableData(title=widget_title(widget.options, " Most viewed pages "), rows=rows)

    async def stacked_bar_new_returning(self, widget: WidgetConfig) -> StackedBarChartData:
        report = await self._daily(["activeUsers"], widget_days(widget.options), ["newVsReturning"])
        per_day: Dict[str, Tuple[int, int]] = {}
        for row in report.get("rows", []):
            day = extract(row, "$.dimensionValues[0].value", default="")
            kind = extract(row, "$.dimensionValues[1].value", default="")
            users = extract(row, "$.metricValues[0].value", "int", default=0)
            new, returning = per_day.get(day, (0, 0))
            if kind == "new":
                new += users
            elif kind == "returning":
                returning += users
            per_day[day] = (new, returning)

        days = sorted(per_day)
        return StackedBarChartData(
            title=widget_title(widget.options, " New / returning users "),
            series=[[per_day[d][0] for d in days], [per_day[d][1] for d in days]],
            dimensions=[_ga_date(d) for d in days],
        )
