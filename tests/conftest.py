import json

import pytest

from cfdk.screen import Surface


class FakeSurface(Surface):
    """Plays back a list of events and records every frame it is asked to draw."""

    def __init__(self, events):
        self.events = list(events)
        self.frames = []
        self._frame = None
        self.closed = 0
        self.opened = False

    def __enter__(self):
        self.opened = True
        return self

    def poll_event(self):
        ev = self.events.pop(0)
        if isinstance(ev, Exception):
            raise ev
        return ev

    def clear(self):
        self._frame = []

    def draw_option(self, index, text, is_selected):
        self._frame.append((index, text, is_selected))

    def draw_notice(self, text):
        self._frame.append(("notice", text))

    def flush(self):
        self.frames.append(self._frame)
        self._frame = None

    def close(self):
        self.closed += 1


def selected_in(frame):
    return [text for (_, text, sel) in (f for f in frame if f[0] != "notice") if sel]


SAMPLE = {
    "theme": {
        "active_context": "ctxB",
        "contexts": {
            "ctxA": {"name": "us one", "application_id": "app-a", "domain": "prod-us",
                     "company_id": 1, "theme_id": "th-a", "env": "fynd-us"},
            "ctxB": {"name": "eu", "application_id": "app-b", "domain": "prod-eu",
                     "company_id": 2, "theme_id": "th-b", "env": "fynd-eu"},
            "ctxC": {"name": "us two", "application_id": "app-c", "domain": "prod-us",
                     "company_id": 3, "theme_id": "th-c", "env": "fynd-us2"},
        },
    },
    "partners": {
        "tunnel": {"port": 5001, "enabled": True},
        "ids": [1, 2, {"nested": None}],
    },
}


@pytest.fixture
def sample():
    return json.loads(json.dumps(SAMPLE))


@pytest.fixture
def config_path(tmp_path, sample):
    d = tmp_path / ".fdk"
    d.mkdir()
    path = d / "context.json"
    path.write_text(json.dumps(sample, indent=2))
    return path


@pytest.fixture
def make_surface():
    made = []

    def factory(*events):
        s = FakeSurface(events)
        made.append(s)
        return s
    factory.made = made
    return factory


class FakeRunner:
    def __init__(self, fail_on=None, exc=None):
        self.calls = []
        self.fail_on = fail_on
        self.exc = exc

    def __call__(self, cmd, check=False):
        self.calls.append(cmd)
        if self.fail_on and cmd[1:] == self.fail_on:
            raise self.exc
