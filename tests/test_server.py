"""
Tests for the Flask JSON API.

The clock is pinned through app.config["CLOCK"] so time figures are exact.
"""
import pytest

from conftest import HOUR, T0
import kanban_server


@pytest.fixture
def client(fixed_clock):
    kanban_server.app.config["TESTING"] = True
    kanban_server.app.config["CLOCK"] = fixed_clock
    with kanban_server.app.test_client() as client:
        yield client
    kanban_server.app.config["CLOCK"] = None


@pytest.fixture
def card_dict():
    return {
        "id": "card-1",
        "title": "Write report",
        "columnId": "doing",
        "createdDate": T0.isoformat(),
        "movementHistory": [
            {"id": "1", "fromColumnId": "", "toColumnId": "todo", "timestamp": T0.isoformat()},
            {"id": "2", "fromColumnId": "todo", "toColumnId": "doing",
             "timestamp": (T0 + 2 * HOUR).isoformat()},
        ],
    }


@pytest.fixture
def columns_dicts(columns):
    return [c.to_dict() for c in columns]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# /api/render
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_render_read_mode(client):
    resp = client.post("/api/render", json={"description": "say *hi*"})
    assert resp.status_code == 200
    data = resp.get_json()
    assert '<strong class="font-bold">hi</strong>' in data["html"]
    assert data["html"].startswith('<div class="rich-text read">')
    assert data["nodes"] == [
        {"type": "text", "content": "say "},
        {"type": "bold", "content": "hi"},
    ]


def test_render_overlay_mode_keeps_markers(client):
    resp = client.post("/api/render", json={"description": "*hi*", "mode": "overlay"})
    html = resp.get_json()["html"]
    assert html.count('<span class="marker">*</span>') == 2


def test_render_escapes_html(client):
    resp = client.post("/api/render", json={"description": "<script>"})
    assert "<script>" not in resp.get_json()["html"]


def test_render_rejects_bad_mode(client):
    resp = client.post("/api/render", json={"description": "x", "mode": "print"})
    assert resp.status_code == 400
    assert "mode" in resp.get_json()["error"]


def test_render_rejects_long_description(client):
    resp = client.post("/api/render", json={"description": "d" * 2001})
    assert resp.status_code == 400


def test_render_requires_json_object(client):
    resp = client.post("/api/render", data="not json", content_type="text/plain")
    assert resp.status_code == 400


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# /api/edit and /api/active-formats
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_edit_format(client):
    resp = client.post("/api/edit", json={
        "op": "format", "name": "bold", "text": "hello", "selection_start": 0, "selection_end": 5,
    })
    assert resp.get_json() == {"handled": True, "text": "*hello*", "cursor": 7}


def test_edit_wrap(client):
    resp = client.post("/api/edit", json={
        "op": "wrap", "prefix": "_", "suffix": "_", "text": "ab", "selection_start": 2,
    })
    assert resp.get_json() == {"handled": True, "text": "ab__", "cursor": 3}


def test_edit_bullet(client):
    resp = client.post("/api/edit", json={"op": "bullet", "text": "task", "selection_start": 0})
    assert resp.get_json() == {"handled": True, "text": "- task", "cursor": 2}


def test_edit_codeblock(client):
    resp = client.post("/api/edit", json={"op": "codeblock", "text": "", "selection_start": 0})
    assert resp.get_json()["text"] == "```\n\n```"


def test_edit_delete_marker(client):
    resp = client.post("/api/edit", json={
        "op": "delete_marker", "text": "a*b*", "selection_start": 2, "is_backspace": True,
    })
    assert resp.get_json() == {"handled": True, "text": "ab", "cursor": 1}


def test_edit_delete_marker_forward(client):
    resp = client.post("/api/edit", json={
        "op": "delete_marker", "text": "a*b*", "selection_start": 1, "is_backspace": False,
    })
    assert resp.get_json() == {"handled": True, "text": "ab", "cursor": 1}


def test_edit_delete_marker_rejects_string_flag(client):
    """"false" as a string is not a boolean"""
    resp = client.post("/api/edit", json={
        "op": "delete_marker", "text": "a*b*", "selection_start": 2, "is_backspace": "false",
    })
    assert resp.status_code == 400
    assert "is_backspace" in resp.get_json()["error"]


def test_edit_delete_marker_not_handled(client):
    resp = client.post("/api/edit", json={
        "op": "delete_marker", "text": "plain", "selection_start": 3,
    })
    assert resp.get_json() == {"handled": False, "text": "plain", "cursor": 3}


def test_edit_delete_marker_with_selection_not_handled(client):
    resp = client.post("/api/edit", json={
        "op": "delete_marker", "text": "a*b*", "selection_start": 1, "selection_end": 3,
    })
    assert resp.get_json()["handled"] is False


@pytest.mark.parametrize("body", [
    {"op": "explode", "text": "x", "selection_start": 0},
    {"op": "format", "name": "blink", "text": "x", "selection_start": 0},
    {"op": "wrap", "text": "x", "selection_start": 0},
    {"op": "bullet", "text": "x"},
    {"op": "bullet", "text": "x", "selection_start": True},
    {"op": "bullet", "text": "x", "selection_start": "0"},
    {"text": "x", "selection_start": 0},
])
def test_edit_bad_requests(client, body):
    resp = client.post("/api/edit", json=body)
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_active_formats(client):
    resp = client.post("/api/active-formats", json={"text": "a *b* c", "cursor": 3})
    assert resp.get_json() == {"formats": ["bold"]}


def test_active_formats_requires_cursor(client):
    resp = client.post("/api/active-formats", json={"text": "a"})
    assert resp.status_code == 400


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# /api/time-tracking
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_time_tracking_summary(client, card_dict, columns_dicts):
    """Clock at T0+10h, card entered doing at T0+2h"""
    resp = client.post("/api/time-tracking", json={"card": card_dict, "columns": columns_dicts})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["timeInCurrentColumn"] == 8 * 3600000
    assert data["timeInCurrentColumnFormatted"] == "8h"
    assert data["totalTime"] == 10 * 3600000
    assert data["currentColumnPercentage"] == 80
    assert data["isCompleted"] is False
    shares = {b["columnId"]: b["percentage"] for b in data["breakdown"]}
    assert shares == {"todo": 20.0, "doing": 80.0, "done": 0.0}


def test_time_tracking_requires_card(client):
    resp = client.post("/api/time-tracking", json={"columns": []})
    assert resp.status_code == 400


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# /api/stats and /api/config
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_stats(client, card_dict, columns_dicts):
    resp = client.post("/api/stats", json={
        "cards": [card_dict], "columns": columns_dicts,
        "start": "2026-01-01", "end": "2026-01-02",
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["totalTasks"] == 1
    assert data["inProgressTasks"] == 1
    assert data["completedTasks"] == 0
    assert len(data["dailyCompletion"]) == 2


def test_stats_bad_date(client):
    resp = client.post("/api/stats", json={"cards": [], "start": "yesterday", "end": "2026-01-02"})
    assert resp.status_code == 400
    assert "Invalid date" in resp.get_json()["error"]


def test_stats_missing_date(client):
    resp = client.post("/api/stats", json={"cards": [], "start": "2026-01-01"})
    assert resp.status_code == 400


def test_config_endpoint(client):
    resp = client.get("/api/config")
    data = resp.get_json()
    assert "done_column_id" in data
    assert "server_port" not in data
