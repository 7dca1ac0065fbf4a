#!/usr/bin/env python3
"""
daykanban API Server
--------------------
Stateless JSON API over the rich text and time tracking engines, for a UI
process that keeps its own boards.

Usage:
    python kanban_server.py
    DAYKANBAN_PORT=3001 python kanban_server.py

API:
    POST /api/render          → { html, nodes }
         body: { description, mode: "read"|"overlay" }
    POST /api/edit            → { handled, text, cursor }
         body: { op, text, selection_start, selection_end, ... }
         ops:  wrap (prefix, suffix) | format (name) | codeblock | bullet
               | delete_marker (is_backspace)
    POST /api/active-formats  → { formats }
         body: { text, cursor }
    POST /api/time-tracking   → time tracking summary
         body: { card, columns }
    POST /api/stats           → dashboard stats
         body: { cards, columns, start, end }   (dates as YYYY-MM-DD)
    GET  /api/config          → public configuration
"""

import logging
import sys
from datetime import date

from flask import Flask, jsonify, request

from daykanban.config import Config
from daykanban.editing import (
    apply_format, get_active_formats, handle_marker_deletion,
    insert_bullet, insert_code_block, wrap_selection,
)
from daykanban.render import render_description
from daykanban.richtext import nodes_to_dicts, parse_description
from daykanban.schema import Card, Column
from daykanban.stats import compute_dashboard_stats
from daykanban.timetracking import TimeTracker
from daykanban.validators import InputValidator

logger = logging.getLogger(__name__)

CONFIG = Config.load()

app = Flask(__name__)
# Tests swap in a fixed clock here
app.config["CLOCK"] = None


class PayloadError(ValueError):
    """Payload is missing a field or has the wrong shape."""


def _payload() -> dict:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise PayloadError("JSON object body required")
    return data


def _field(data: dict, name: str, kind=str):
    if name not in data:
        raise PayloadError(f"{name} is required")
    value = data[name]
    if kind is int and isinstance(value, bool):
        raise PayloadError(f"{name} must be an integer")
    if not isinstance(value, kind):
        raise PayloadError(f"{name} must be {'an integer' if kind is int else 'a ' + kind.__name__}")
    return value


def _flag(data: dict, name: str, default: bool) -> bool:
    value = data.get(name, default)
    if not isinstance(value, bool):
        raise PayloadError(f"{name} must be a boolean")
    return value


def _tracker() -> TimeTracker:
    return TimeTracker(clock=app.config.get("CLOCK"), done_column_id=CONFIG.done_column_id)


def _columns(data: dict) -> list:
    return [Column.from_dict(c) for c in data.get("columns") or [] if isinstance(c, dict)]


@app.errorhandler(PayloadError)
def handle_bad_request(e):
    logger.warning(f"{request.method} {request.path}: {e}")
    return jsonify({"error": str(e)}), 400


# ── Rich text ────────────────────────────────────────────────────────────────

@app.route("/api/render", methods=["POST"])
def api_render():
    data = _payload()
    description = data.get("description") or ""
    if not isinstance(description, str):
        raise PayloadError("description must be a string")
    mode = data.get("mode", "read")
    if mode not in ("read", "overlay"):
        raise PayloadError(f"Invalid mode: {mode}")

    check = InputValidator.validate_description(description, CONFIG.max_description_length)
    if not check.valid:
        raise PayloadError(check.error)

    return jsonify({
        "html": str(render_description(description, mode)),
        "nodes": nodes_to_dicts(parse_description(description)),
    })


@app.route("/api/edit", methods=["POST"])
def api_edit():
    data = _payload()
    op = _field(data, "op")
    text = data.get("text") or ""
    if not isinstance(text, str):
        raise PayloadError("text must be a string")
    start = _field(data, "selection_start", int)
    end = data.get("selection_end", start)
    if not isinstance(end, int) or isinstance(end, bool):
        raise PayloadError("selection_end must be an integer")

    if op == "wrap":
        result = wrap_selection(text, start, end, _field(data, "prefix"), _field(data, "suffix"))
    elif op == "format":
        try:
            result = apply_format(text, start, end, _field(data, "name"))
        except ValueError as e:
            raise PayloadError(str(e)) from None
    elif op == "codeblock":
        result = insert_code_block(text, start, end)
    elif op == "bullet":
        result = insert_bullet(text, start)
    elif op == "delete_marker":
        # marker protection only applies to a collapsed caret
        result = None
        if start == end:
            result = handle_marker_deletion(text, start, _flag(data, "is_backspace", True))
    else:
        raise PayloadError(f"Unknown op: {op}")

    if result is None:
        return jsonify({"handled": False, "text": text, "cursor": start})
    return jsonify({"handled": True, **result.to_dict()})


@app.route("/api/active-formats", methods=["POST"])
def api_active_formats():
    data = _payload()
    text = _field(data, "text")
    cursor = _field(data, "cursor", int)
    return jsonify({"formats": sorted(get_active_formats(text, cursor))})


# ── Time tracking ────────────────────────────────────────────────────────────

@app.route("/api/time-tracking", methods=["POST"])
def api_time_tracking():
    data = _payload()
    card = Card.from_dict(_field(data, "card", dict))
    summary = _tracker().summarize(card, _columns(data))
    return jsonify(summary.to_dict())


@app.route("/api/stats", methods=["POST"])
def api_stats():
    data = _payload()
    start, end = _field(data, "start"), _field(data, "end")
    try:
        start, end = date.fromisoformat(start), date.fromisoformat(end)
    except ValueError as e:
        raise PayloadError(f"Invalid date: {e}") from None
    cards = [Card.from_dict(c) for c in data.get("cards") or [] if isinstance(c, dict)]
    stats = compute_dashboard_stats(
        cards, _columns(data), start, end,
        tracker=_tracker(),
        in_progress_column_id=CONFIG.in_progress_column_id,
    )
    return jsonify(stats.to_dict())


@app.route("/api/config", methods=["GET"])
def api_config():
    return jsonify(CONFIG.public_dict())


def main():
    logging.basicConfig(
        level=getattr(logging, CONFIG.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logger.info(f"Starting daykanban API on {CONFIG.server_host}:{CONFIG.server_port}")
    app.run(host=CONFIG.server_host, port=CONFIG.server_port)


if __name__ == "__main__":
    main()
