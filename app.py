#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import datetime
import io
from typing import Any, Dict, Tuple

from flask import Flask, jsonify, render_template, request, send_file

from constants import DEFAULT_TIMEOUT, HOST, LAST_RESULTS, PORT
from logging_config import setup_logging
from verifier import all_succeeded, summary_message, to_csv_bytes, verify_text

app = Flask(__name__)


def _read_payload() -> Tuple[str, str, bool]:
    """Return (existing, recommended, wants_json) from a JSON or form post."""
    if request.is_json:
        data: Dict[str, Any] = request.get_json(silent=True) or {}
        return str(data.get("existing") or ""), str(data.get("recommended") or ""), True
    return request.form.get("existing", ""), request.form.get("recommended", ""), False


@app.route("/")
def index():
    return render_template("index.html", timeout=DEFAULT_TIMEOUT, results=[], error=None)


@app.route("/verify", methods=["POST"])
def verify():
    existing, recommended, wants_json = _read_payload()
    state = verify_text(existing, recommended, timeout=DEFAULT_TIMEOUT)
    LAST_RESULTS[:] = state["results"]

    if not wants_json:
        status = 400 if state["run_error"] else 200
        html = render_template(
            "index.html",
            timeout=DEFAULT_TIMEOUT,
            existing=existing,
            recommended=recommended,
            results=state["results"],
            error=state["run_error"],
            summary=summary_message(state["results"]) if state["results"] else None,
            all_success=all_succeeded(state["results"]),
        )
        return html, status

    payload = {
        "error": state["run_error"],
        "results": state["results"],
        "progress": state["progress_percent"],
        "all_success": all_succeeded(state["results"]),
    }
    if state["run_error"]:
        return jsonify(payload), 400
    return jsonify(payload)


@app.route("/download_csv", methods=["GET"])
def download_csv():
    csv_bytes = to_csv_bytes(LAST_RESULTS or [])
    ts = datetime.datetime.now(datetime.timezone.utc).strftime("%Y%m%d_%H%M%S")
    mem = io.BytesIO(csv_bytes)
    mem.seek(0)
    return send_file(
        mem,
        mimetype="text/csv; charset=utf-8",
        as_attachment=True,
        download_name=f"redirects_{ts}.csv",
    )


if __name__ == "__main__":
    setup_logging()
    app.run(host=HOST, port=PORT, debug=True)
