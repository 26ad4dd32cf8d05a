import asyncio
from unittest.mock import MagicMock

from devdash.config_loader import ProjectConfig
from devdash.data_controller import DataController
from devdash.options import Color
from devdash.project import build_project
from devdash.providers.base import Capability, ProviderConstructionError, ProviderWidget
from devdash.widgets import TextBoxData


class FakeProvider(ProviderWidget):
    def __init__(self, capability, calls, delay=0.0, fail=False):
        super().__init__()
        self.capability = capability
        self.calls = calls
        self.delay = delay
        self.fail = fail

    async def fetch(self, widget):
        self.calls.append(widget.name)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("boom")
        return TextBoxData(title=f" {widget.name} ", text="ok")


def make_config(services, rows):
    return ProjectConfig.model_validate({
        "name": "site",
        "services": services,
        "widgets": [
            {"row": [{"col": {"size": size, "elements": [{"name": n} for n in names]}} for size, names in row]}
            for row in rows
        ],
    })


def factories_for(calls, **kwargs):
    return {c: (lambda s, c=c: FakeProvider(c, calls, **kwargs)) for c in Capability}


ALL_SERVICES = {
    "google_analytics": {"property_id": "1", "access_token": "t"},
    "google_search_console": {"address": "https://example.com", "access_token": "t"},
    "monitor": {"address": "https://example.com"},
    "github": {"owner": "acme", "repository": "dash"},
}


# ── 构建 ──────────────────────────────────────────────

def test_empty_services_construct_nothing():
    factory = MagicMock()
    config = make_config({}, [[("M", ["mon.box_availability"])]])
    project = build_project(config, {c: factory for c in Capability})

    factory.assert_not_called()
    assert project.bound_capabilities() == []
    assert project.errors == []


def test_only_configured_services_are_bound():
    calls = []
    config = make_config({"monitor": {"address": "https://example.com"}}, [])
    project = build_project(config, factories_for(calls))

    assert project.bound_capabilities() == [Capability.MONITOR]
    assert project.provider(Capability.ISSUE_TRACKER) is None


def test_construction_error_is_collected():
    def broken(service):
        raise ProviderConstructionError("issue_tracker", "owner and repository are required")

    calls = []
    factories = factories_for(calls)
    factories[Capability.ISSUE_TRACKER] = broken
    project = build_project(make_config(ALL_SERVICES, []), factories)

    assert project.errors == ["issue_tracker: owner and repository are required"]
    assert Capability.ISSUE_TRACKER not in project.bound_capabilities()
    assert len(project.bound_capabilities()) == 3


def test_default_factories_build_real_providers():
    project = build_project(make_config({"monitor": {"address": "not-a-url"}, "github": {"owner": "acme", "repository": "dash"}}, []))
    assert project.bound_capabilities() == [Capability.ISSUE_TRACKER]
    assert project.errors[0].startswith("monitor:")


# ── 抓取 ──────────────────────────────────────────────

def test_fetch_in_capability_order():
    calls = []
    config = make_config(ALL_SERVICES, [
        [("M", ["github.box_stars", "mon.box_availability"]), ("M", ["gsc.table_pages"])],
        [("XXL", ["ga.bar_sessions"])],
    ])
    project = build_project(config, factories_for(calls))
    frame = asyncio.run(project.fetch(timeout=1))

    assert calls == ["ga.bar_sessions", "gsc.table_pages", "mon.box_availability", "github.box_stars"]
    # results stay in layout order
    assert [c.data.title for c in frame.cells[0][0]] == [" github.box_stars ", " mon.box_availability "]
    assert frame.cells[1][0][0].data.text == "ok"


def test_unbound_and_unknown_widgets():
    calls = []
    config = make_config({"monitor": {"address": "https://example.com"}}, [
        [("M", ["github.box_stars", "mon.box_availability", "travis.box_builds"])],
    ])
    project = build_project(config, factories_for(calls))
    frame = asyncio.run(project.fetch(timeout=1))

    assert calls == ["mon.box_availability"]
    cells = frame.cells[0][0]
    assert len(cells) == 2
    assert cells[1].data.text == "error: unknown widget 'travis.box_builds'"
    assert cells[1].options["border_color"] == "red"


def test_timeout_becomes_error_cell():
    calls = []
    config = make_config({"monitor": {"address": "https://example.com"}}, [[("M", ["mon.box_availability"])]])
    project = build_project(config, factories_for(calls, delay=5))
    frame = asyncio.run(project.fetch(timeout=0.05))

    (cell,) = frame.cells[0][0]
    assert cell.data.text == "error: timed out after 0.05s"


def test_failure_uses_stale_data():
    store = DataController()
    config = make_config({"monitor": {"address": "https://example.com"}}, [[("M", ["mon.box_availability"])]])

    ok = build_project(config, factories_for([]))
    asyncio.run(ok.fetch(timeout=1, store=store))

    failing = build_project(config, factories_for([], fail=True))
    frame = asyncio.run(failing.fetch(timeout=1, store=store))

    (cell,) = frame.cells[0][0]
    assert cell.data.title == " mon.box_availability (stale) "
    assert cell.data.text == "ok"


# ── 绘制 ──────────────────────────────────────────────

def test_render_layout_order(tui, manager):
    calls = []
    config = make_config({"monitor": {"address": "https://example.com"}}, [
        [("M", ["mon.box_availability"])],
        [("L", ["mon.box_response_time"])],
    ])
    project = build_project(config, factories_for(calls))
    frame = asyncio.run(project.fetch(timeout=1))
    project.render(tui, frame)

    assert manager.names() == ["title", "add_row", "add_col", "text_box", "add_row", "add_col", "text_box"]
    assert [kwargs["size"] for kwargs in manager.draws("add_col")] == [6, 8]
    assert manager.draws("title")[0]["title"] == "site"


def test_render_service_errors(tui, manager):
    def broken(service):
        raise ProviderConstructionError("monitor", "invalid address")

    project = build_project(make_config({"monitor": {"address": "x"}}, []), {Capability.MONITOR: broken})
    project.render(tui, asyncio.run(project.fetch(timeout=1)))

    (kwargs,) = manager.draws("text_box")
    assert kwargs["title"] == " Service errors "
    assert kwargs["data"] == "monitor: invalid address"
    assert kwargs["border_color"] == Color.RED
