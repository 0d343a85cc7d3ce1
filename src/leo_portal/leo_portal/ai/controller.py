from __future__ import annotations

from flask import Flask

from ..common.web import json_api, json_ok, login_required, request_data
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/assistant", methods=["POST"], endpoint="api_assistant")
    @login_required
    @json_api
    def api_assistant():
        data = request_data()
        answer = container.assistant_service.ask(question=data.get("question", ""), context=data.get("context", ""))
        return json_ok(answer=answer)
