"""
定时刷新：周期性地重新抓取数据并原地重绘，不重新初始化终端会话。

状态机只有 IDLE 与 RENDERING 两个状态。上一轮尚未结束时到达的
tick 会被跳过 (而不是排队或并发执行)。
"""

import asyncio
import logging
import threading
from enum import Enum
from typing import List, Mapping, Optional, Set

from devdash.config_loader import AppConfig
from devdash.data_controller import DataController
from devdash.project import DEFAULT_FACTORIES, Project, ProjectFrame, ProviderFactory, build_project
from devdash.providers.base import Capability
from devdash.tui import Tui, display_error

logger = logging.getLogger(__name__)


class RefreshState(str, Enum):
    IDLE = "idle"
    RENDERING = "rendering"


class Refresher:
    """驱动一轮轮的 "抓取 + 清屏 + 重绘"。"""

    def __init__(
        self,
        tui: Tui,
        config: AppConfig,
        store: DataController | None = None,
        factories: Mapping[Capability, ProviderFactory] = DEFAULT_FACTORIES,
    ):
        self._tui = tui
        self._projects = config.projects
        self._interval = config.general.refresh
        self._timeout = config.general.fetch_timeout
        self._store = store
        self._factories = factories

        self._state = RefreshState.IDLE
        self.passes = 0
        self.skipped_ticks = 0

        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop: Optional[asyncio.Event] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def state(self) -> RefreshState:
        return self._state

    # ── 单轮刷新 ──────────────────────────────────────

    async def refresh(self) -> bool:
        """
        执行一轮刷新。已有一轮在进行时直接返回 False。
        抓取阶段不持有屏幕锁；清屏与重绘在 tui.lock 内一次完成。
        """
        if self._state is RefreshState.RENDERING:
            self.skipped_ticks += 1
            logger.warning("上一轮刷新尚未完成，跳过本次 tick")
            return False

        self._state = RefreshState.RENDERING
        try:
            await self._pass()
        except Exception as e:
            logger.error(f"刷新失败: {e}", exc_info=True)
            with self._tui.lock:
                self._tui.clean()
                display_error(self._tui, e)
        finally:
            self._state = RefreshState.IDLE

        self.passes += 1
        logger.debug(f"第 {self.passes} 轮刷新完成")
        return True

    async def _pass(self):
        frames: List[tuple[Project, ProjectFrame]] = []
        for project_config in self._projects:
            project = build_project(project_config, self._factories)
            frames.append((project, await project.fetch(self._timeout, self._store)))

        with self._tui.lock:
            self._tui.clean()
            for project, frame in frames:
                project.render(self._tui, frame)
            self._tui.render()

    # ── 定时器 ────────────────────────────────────────

    def tick(self) -> bool:
        """定时器回调：空闲时在后台启动一轮刷新，返回是否启动。"""
        if self._state is RefreshState.RENDERING:
            self.skipped_ticks += 1
            logger.warning("上一轮刷新尚未完成，跳过本次 tick")
            return False
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return True

    def _on_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("刷新任务异常退出", exc_info=task.exception())

    async def run(self):
        """立即刷新一次，之后按固定间隔 tick，直到 stop()。"""
        self._loop = asyncio.get_running_loop()
        self._stop = asyncio.Event()
        await self.refresh()
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), self._interval)
            except asyncio.TimeoutError:
                self.tick()

    # ── 线程 ──────────────────────────────────────────

    def start(self) -> threading.Thread:
        """在后台守护线程中运行独立的事件循环。"""
        self._thread = threading.Thread(
            target=lambda: asyncio.run(self.run()),
            name="devdash-refresh",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def stop(self, timeout: float = 2.0):
        """通知后台循环退出；进行中的抓取被放弃。"""
        if self._thread is None or not self._thread.is_alive():
            return
        if self._loop is not None and self._stop is not None:
            self._loop.call_soon_threadsafe(self._stop.set)
        self._thread.join(timeout=timeout)
