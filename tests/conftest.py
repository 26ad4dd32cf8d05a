import pytest

from devdash.tui import Tui


class RecordingManager:
    """记录所有后端调用的假 Manager。"""

    def __init__(self):
        self.calls = []
        self.closed = 0
        self.quit_key = None

    def _record(self, name, **kwargs):
        self.calls.append((name, kwargs))

    def title(self, **kwargs):
        self._record("title", **kwargs)

    def text_box(self, **kwargs):
        self._record("text_box", **kwargs)

    def bar_chart(self, **kwargs):
        self._record("bar_chart", **kwargs)

    def stacked_bar_chart(self, **kwargs):
        self._record("stacked_bar_chart", **kwargs)

    def table(self, **kwargs):
        self._record("table", **kwargs)

    def add_col(self, size):
        self._record("add_col", size=size)

    def add_row(self):
        self._record("add_row")

    def render(self):
        self._record("render")

    def clean(self):
        self._record("clean")

    def close(self):
        self.closed += 1

    def k_quit(self, key):
        self.quit_key = key

    def loop(self):
        self._record("loop")

    def names(self):
        return [name for name, _ in self.calls]

    def draws(self, name):
        return [kwargs for n, kwargs in self.calls if n == name]


@pytest.fixture
def manager():
    return RecordingManager()


@pytest.fixture
def tui(manager):
    return Tui(manager)
