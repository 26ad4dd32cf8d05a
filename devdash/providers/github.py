"""
GitHub 数据源：仓库统计、Issue 列表与访问流量。
"""

import logging
from typing import Any, Dict, List

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

GITHUB_API = "https://api.github.com"


def _day_labels(timestamps: List[str]) -> List[str]:
    # "2024-05-03T00:00:00Z" -> "05-03"
    return [ts[5:10] for ts in timestamps]


class GithubWidget(ProviderWidget):
    capability = Capability.ISSUE_TRACKER
    widgets = {
        "github.box_stars": "box_stars",
        "github.box_watchers": "box_watchers",
        "github.box_open_issues": "box_open_issues",
        "github.table_issues": "table_issues",
        "github.bar_views": "bar_views",
        "github.stacked_bar_traffic": "stacked_bar_traffic",
    }

    def __init__(
        self,
        token: str,
        owner: str,
        repository: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(transport)
        if not owner or not repository:
            raise ProviderConstructionError(self.name, "owner and repository are required")
        try:
            self.token = resolve_env(token) or ""
        except ValueError as e:
            raise ProviderConstructionError(self.name, str(e)) from e
        self.owner = owner
        self.repository = repository

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repository}"

    async def _get_json(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        async with self._client(base_url=GITHUB_API, headers=headers) as client:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()

    # ── 统计 ──────────────────────────────────────────

    async def _repo_counter(self, widget: WidgetConfig, expr: str, title: str) -> TextBoxData:
        repo = await self._get_json(self._repo_path)
        count = extract(repo, expr, "int", default=0)
        return TextBoxData(title=widget_title(widget.options, title), text=str(count))

    async def box_stars(self, widget: WidgetConfig) -> TextBoxData:
        return await self._repo_counter(widget, "$.stargazers_count", " Stars ")

    async def box_watchers(self, widget: WidgetConfig) -> TextBoxData:
        return await self._repo_counter(widget, "$.subscribers_count", " Watchers ")

    async def box_open_issues(self, widget: WidgetConfig) -> TextBoxData:
        return await self._repo_counter(widget, "$.open_issues_count", " Open issues ")

    # ── Issues ────────────────────────────────────────

    async def table_issues(self, widget: WidgetConfig) -> TableData:
        limit = widget_limit(widget.options)
        issues = await self._get_json(
            f"{self._repo_path}/issues",
            params={"state": "open", "per_page": limit},
        )
        rows = [["Title", "Author", "Created"]]
        for issue in issues:
            # the issues endpoint also returns pull requests
            if "pull_request" in issue:
                continue
            rows.append([
                extract(issue, "$.title", default=""),
                extract(issue, "$.user.login", default=""),
                extract(issue, "$.created_at", default="")[:10],
            ])
        return TableData(title=widget_title(widget.options, " Open issues "), rows=rows[: limit + 1])

    # ── Traffic ───────────────────────────────────────

    async def _traffic(self, widget: WidgetConfig):
        traffic = await self._get_json(f"{self._repo_path}/traffic/views", params={"per": "day"})
        days = widget_days(widget.options)
        counts = extract_all(traffic, "$.views[*].count", "int")[-days:]
        uniques = extract_all(traffic, "$.views[*].uniques", "int")[-days:]
        labels = _day_labels(extract_all(traffic, "$.views[*].timestamp"))[-days:]
        return counts, uniques, labels

    async def bar_views(self, widget: WidgetConfig) -> BarChartData:
        counts, _, labels = await self._traffic(widget)
        return BarChartData(
            title=widget_title(widget.options, " Views "),
            values=counts,
            dimensions=labels,
        )

    async def stacked_bar_traffic(self, widget: WidgetConfig) -> StackedBarChartData:
        counts, uniques, labels = await self._traffic(widget)
        # stack unique visitors under the repeated views
        repeated = [max(c - u, 0) for c, u in zip(counts, uniques)]
        return StackedBarChartData(
            title=widget_title(widget.options, " Unique / repeated views "),
            series=[uniques, repeated],
            dimensions=labels,
        )
