"""
项目组装：把一个项目的配置绑定到数据源，抓取数据并按布局绘制。
"""

import asyncio
import logging
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from devdash.config_loader import ProjectConfig, ServiceConfig, ServicesConfig, WidgetConfig
from devdash.data_controller import DataController
from devdash.options import OptionMap
from devdash.providers.base import Capability, ProviderConstructionError, ProviderWidget
from devdash.providers.github import GithubWidget
from devdash.providers.google_analytics import GaWidget
from devdash.providers.monitor import MonitorWidget
from devdash.providers.search_console import GscWidget
from devdash.tui import Tui
from devdash.widgets import TextBoxData, WidgetData

logger = logging.getLogger(__name__)

_PROVIDER_ERRORS_OPTIONS: OptionMap = {"border_color": "red", "title_color": "red", "height": "4"}


class Cell(BaseModel):
    """一个待绘制的组件：数据 + 已合并主题的选项。"""
    data: WidgetData
    options: OptionMap = Field(default_factory=dict)


class ProjectFrame(BaseModel):
    """一次刷新中某个项目抓取到的全部数据，cells[r][c] 对应布局中的列。"""
    cells: List[List[List[Cell]]] = Field(default_factory=list)


class Project:
    def __init__(
        self,
        name: str,
        title_options: OptionMap,
        rows: List[List[List[WidgetConfig]]],
        sizes: List[List[str]],
    ):
        self.name = name
        self.title_options = title_options
        self.rows = rows
        self.sizes = sizes
        # one optional slot per capability, iterated in declared order
        self._providers: Dict[Capability, Optional[ProviderWidget]] = {c: None for c in Capability}
        self.errors: List[str] = []

    # ── 绑定 ──────────────────────────────────────────

    def bind(self, provider: ProviderWidget):
        self._providers[provider.capability] = provider

    def provider(self, capability: Capability) -> Optional[ProviderWidget]:
        return self._providers[capability]

    def bound_capabilities(self) -> List[Capability]:
        return [c for c, p in self._providers.items() if p is not None]

    # ── 抓取 ──────────────────────────────────────────

    async def fetch(self, timeout: float, store: DataController | None = None) -> ProjectFrame:
        """
        抓取所有已绑定数据源的组件数据。
        调用按能力的声明顺序发起 (Analytics, Search Console, Monitor, Issue tracker)，
        结果按布局顺序放回。未绑定能力的组件直接跳过。
        """
        cells: List[List[List[Optional[Cell]]]] = [
            [[None] * len(col) for col in row] for row in self.rows
        ]
        jobs: List[Tuple[int, Tuple[int, int, int], WidgetConfig, ProviderWidget]] = []
        order = list(Capability)

        for r, row in enumerate(self.rows):
            for c, col in enumerate(row):
                for i, widget in enumerate(col):
                    capability = Capability.for_widget(widget)
                    if capability is None:
                        cells[r][c][i] = self._error_cell(widget, f"unknown widget '{widget.name}'")
                        continue
                    provider = self._providers[capability]
                    if provider is None:
                        logger.warning(
                            f"[{self.name}] {widget.name}: service '{capability.name.lower()}' not configured, skipped"
                        )
                        continue
                    jobs.append((order.index(capability), (r, c, i), widget, provider))

        jobs.sort(key=lambda job: job[0])
        results = await asyncio.gather(*(
            self._fetch_one(widget, provider, position, timeout, store)
            for _, position, widget, provider in jobs
        ))
        for (_, (r, c, i), _, _), cell in zip(jobs, results):
            cells[r][c][i] = cell

        return ProjectFrame(cells=[
            [[cell for cell in col if cell is not None] for col in row] for row in cells
        ])

    def _key(self, widget: WidgetConfig, position: Tuple[int, int, int]) -> str:
        r, c, i = position
        return f"{self.name}/{r}.{c}.{i}/{widget.name}"

    async def _fetch_one(
        self,
        widget: WidgetConfig,
        provider: ProviderWidget,
        position: Tuple[int, int, int],
        timeout: float,
        store: DataController | None,
    ) -> Cell:
        key = self._key(widget, position)
        try:
            data = await asyncio.wait_for(provider.fetch(widget), timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[{key}] 抓取超时 ({timeout:g}s)")
            return self._fallback(key, widget, f"timed out after {timeout:g}s", store)
        except Exception as e:
            logger.error(f"[{key}] 抓取失败: {e}")
            return self._fallback(key, widget, str(e) or type(e).__name__, store)

        if store is not None:
            store.upsert(key, data)
        return Cell(data=data, options=widget.options)

    def _fallback(self, key: str, widget: WidgetConfig, reason: str, store: DataController | None) -> Cell:
        """优先使用最近一次成功的数据，否则显示错误框。"""
        stale = store.get_latest(key) if store is not None else None
        if stale is not None:
            logger.info(f"[{key}] 使用缓存数据")
            return Cell(data=stale.model_copy(update={"title": f"{stale.title.rstrip()} (stale) "}), options=widget.options)
        return self._error_cell(widget, reason)

    @staticmethod
    def _error_cell(widget: WidgetConfig, reason: str) -> Cell:
        options = {**widget.options, "border_color": "red"}
        return Cell(data=TextBoxData(title=f" {widget.name} ", text=f"error: {reason}"), options=options)

    # ── 绘制 ──────────────────────────────────────────

    def render(self, tui: Tui, frame: ProjectFrame):
        """
        绘制标题、各行各列的组件，以及数据源创建错误。
        尺寸或布尔选项无效时抛出异常，由调用方显示错误面板。
        """
        tui.add_project_title(self.name, self.title_options)
        for r, row_sizes in enumerate(self.sizes):
            tui.add_row()
            for c, size in enumerate(row_sizes):
                tui.add_col(size)
                for cell in frame.cells[r][c]:
                    tui.draw(cell.data, cell.options)

        if self.errors:
            tui.add_row()
            tui.add_col("XXL")
            tui.add_text_box("\n".join(self.errors), " Service errors ", _PROVIDER_ERRORS_OPTIONS)


# ── 构建 ──────────────────────────────────────────────

ProviderFactory = Callable[[ServiceConfig], ProviderWidget]

DEFAULT_FACTORIES: Dict[Capability, ProviderFactory] = {
    Capability.ANALYTICS: lambda s: GaWidget(s.property_id, s.access_token),
    Capability.SEARCH_CONSOLE: lambda s: GscWidget(s.address, s.access_token),
    Capability.MONITOR: lambda s: MonitorWidget(s.address),
    Capability.ISSUE_TRACKER: lambda s: GithubWidget(s.token, s.owner, s.repository),
}


def service_for(services: ServicesConfig, capability: Capability) -> ServiceConfig:
    return {
        Capability.ANALYTICS: services.google_analytics,
        Capability.SEARCH_CONSOLE: services.google_search_console,
        Capability.MONITOR: services.monitor,
        Capability.ISSUE_TRACKER: services.github,
    }[capability]


def build_project(
    config: ProjectConfig,
    factories: Mapping[Capability, ProviderFactory] = DEFAULT_FACTORIES,
) -> Project:
    """
    根据配置创建项目并绑定数据源。
    未配置的集成直接跳过；创建失败的集成记录错误后忽略，不影响其他集成。
    """
    rows, sizes = config.order_widgets()
    project = Project(config.name, config.title_options, rows, sizes)

    for capability in Capability:
        service = service_for(config.services, capability)
        if service.empty():
            continue
        try:
            project.bind(factories[capability](service))
        except ProviderConstructionError as e:
            logger.warning(f"[{config.name}] 数据源创建失败: {e}")
            project.errors.append(str(e))

    return project
