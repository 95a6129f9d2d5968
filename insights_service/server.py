#!/usr/bin/env python3
"""
HTTP server for the personality insights session backend.

POST /setContent stores a fresh profile for a session; /getDescription and
/getGraph/<id> render the stored profile back out.
"""

from __future__ import annotations

import json
from typing import Optional
from urllib.parse import quote

from flask import Flask, jsonify, render_template, request

try:
    from .analysis_client import AnalysisError, PersonalityInsightsClient
    from .charts import build_chart, find_node
    from .config import Settings, load_settings
    from .flatten import flatten_profile
    from .logger_config import setup_logger
    from .policy import DEFAULT_CHART_STYLE, DEFAULT_DISPLAY_POLICY
    from .profile import ProfileFormatError, ProfileNode, parse_profile, root_children
    from .storage import SessionStore, StorageError, get_response, open_storage
except ImportError:
    import os
    import sys
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    from insights_service.analysis_client import AnalysisError, PersonalityInsightsClient
    from insights_service.charts import build_chart, find_node
    from insights_service.config import Settings, load_settings
    from insights_service.flatten import flatten_profile
    from insights_service.logger_config import setup_logger
    from insights_service.policy import DEFAULT_CHART_STYLE, DEFAULT_DISPLAY_POLICY
    from insights_service.profile import ProfileFormatError, ProfileNode, parse_profile, root_children
    from insights_service.storage import SessionStore, StorageError, get_response, open_storage

logger = setup_logger("insights_service")

KINETISE_GENERATOR_URL = "https://bluemix.kinetise.com/developer/generator/index/template/watson"


def error_response(message: str, status: int = 400):
    return jsonify({"message": {"title": "Error", "description": message}}), status


def _session_id() -> Optional[str]:
    # an empty ?sessionId= counts as missing
    return request.args.get("sessionId") or None


def _content() -> Optional[str]:
    body = request.get_json(silent=True) or {}
    form = body.get("form") if isinstance(body, dict) else None
    if not isinstance(form, dict):
        return None
    content = form.get("content")
    if not isinstance(content, str) or not content.strip():
        return None
    return content


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[SessionStore] = None,
    analyzer: Optional[PersonalityInsightsClient] = None,
) -> Flask:
    settings = settings or load_settings()
    storage = storage if storage is not None else open_storage(settings)
    analyzer = analyzer or PersonalityInsightsClient(
        settings.insights_url,
        settings.insights_username,
        settings.insights_password,
        language=settings.insights_language,
        timeout_s=settings.request_timeout_s,
    )

    app = Flask(__name__)
    app.config["SETTINGS"] = settings

    def load_profile(session_id: Optional[str]) -> Optional[ProfileNode]:
        if not session_id:
            return None
        try:
            raw = get_response(storage, session_id)
        except StorageError as e:
            logger.error("Content fetching error for %s: %s", session_id, e)
            return None
        if raw is None:
            logger.warning("No entry for sessionID: %s", session_id)
            return None
        try:
            return parse_profile(raw)
        except ProfileFormatError as e:
            logger.error("Stored profile for %s is unreadable: %s", session_id, e)
            return None

    @app.route('/health', methods=['GET'])
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok"})

    @app.route('/setContent', methods=['POST'])
    def set_content():
        """Analyze posted text and store the profile for the session."""
        session_id = _session_id()
        if session_id is None:
            return error_response("Invalid session ID!")
        content = _content()
        if content is None:
            return error_response("Invalid content!")

        try:
            result = analyzer.profile(content)
            parse_profile(result)
        except (AnalysisError, ProfileFormatError) as e:
            logger.error("Personality insights fetch failed: %s", e)
            return error_response("Could not fetch Personality Insights")

        try:
            storage.save_record(session_id, content, json.dumps(result))
        except (StorageError, OSError) as e:
            logger.error("Failed to insert content: %s", e)
            return error_response("Could not fetch Personality Insights")

        logger.info("Stored profile for session %s", session_id)
        return jsonify({}), 200

    @app.route('/getDescription', methods=['GET'])
    def get_description():
        """Flattened description rows for the stored profile."""
        session_id = _session_id()
        root = load_profile(session_id)
        if root is None:
            return error_response("No content defined for this session")

        items = flatten_profile(
            root_children(root),
            base_url=settings.base_url,
            session_id=session_id,
            policy=DEFAULT_DISPLAY_POLICY,
        )
        return jsonify([item.to_dict() for item in items]), 200

    @app.route('/getGraph/<node_id>', methods=['GET'])
    def get_graph(node_id: str):
        """Doughnut chart page for one trait of the stored profile."""
        root = load_profile(_session_id())
        node = find_node(node_id, root_children(root)) if root is not None else None
        if node is None:
            return render_template("404.html"), 404

        chart = build_chart(node, DEFAULT_CHART_STYLE).to_dict()
        return render_template("chart.html", title=node.name, data=chart["data"], options=chart["options"])

    @app.route('/', methods=['GET'])
    def index():
        host_url = request.host_url.rstrip("/")
        return render_template(
            "index.html",
            formUrl=f"{host_url}/setContent",
            feedUrl=f"{host_url}/getDescription",
            appTemplateUrl=f"{KINETISE_GENERATOR_URL}?backendUrl={quote(host_url, safe='')}",
        )

    return app


app = create_app()


if __name__ == '__main__':
    logger.info("server starting on %s", app.config["SETTINGS"].base_url)
    app.run(host=app.config["SETTINGS"].host, port=app.config["SETTINGS"].port)
