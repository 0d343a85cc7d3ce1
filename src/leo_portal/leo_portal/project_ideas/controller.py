from __future__ import annotations

from flask import Flask, render_template, session

from ..common.web import (
    admin_required,
    current_role,
    current_user_id,
    flag,
    json_api,
    json_ok,
    login_required,
    request_data,
)
from ..core.enums import ProjectIdeaStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .service import IdeaInput


def _idea_input(data: dict) -> IdeaInput:
    return IdeaInput(
        project_name=data.get("project_name", ""),
        goal=data.get("goal", ""),
        target_audience=data.get("target_audience", ""),
        budget=str(data.get("budget", "")),
        timeline=data.get("timeline", ""),
        special_considerations=data.get("special_considerations"),
    )


def register(app: Flask, container: Container) -> None:
    svc = container.project_idea_service

    @app.route("/project-ideas", endpoint="project_ideas")
    @login_required
    def project_ideas_page():
        ideas = svc.list_for_author(current_user_id())
        return render_template("project_ideas.html", ideas=ideas, active_page="project_ideas")

    @app.route("/admin/project-ideas", endpoint="admin_project_ideas")
    @admin_required
    def admin_project_ideas_page():
        ideas = svc.list_for_review(current_role=current_role())
        return render_template("admin/project_ideas.html", ideas=ideas, active_page="admin_project_ideas")

    @app.route("/api/project-ideas/generate", methods=["POST"], endpoint="api_generate_proposal")
    @login_required
    @json_api
    def api_generate_proposal():
        return json_ok(svc.generate_proposal(_idea_input(request_data())))

    @app.route("/api/project-ideas", methods=["GET"], endpoint="api_my_ideas")
    @login_required
    @json_api
    def api_my_ideas():
        return json_ok([i.to_dict() for i in svc.list_for_author(current_user_id())])

    @app.route("/api/project-ideas", methods=["POST"], endpoint="api_save_idea")
    @login_required
    @json_api
    def api_save_idea():
        data = request_data()
        idea = svc.save_draft(
            author_id=current_user_id(),
            author_name=session.get("name", ""),
            data=_idea_input(data),
            proposal=data.get("proposal"),
            submit=flag(data.get("submit")),
        )
        return json_ok(idea.to_dict(), 201, message="Project idea saved")

    @app.route("/api/project-ideas/<int:idea_id>", methods=["GET"], endpoint="api_get_idea")
    @login_required
    @json_api
    def api_get_idea(idea_id: int):
        idea = svc.get(user_id=current_user_id(), current_role=current_role(), idea_id=idea_id)
        return json_ok(idea.to_dict())

    @app.route("/api/project-ideas/<int:idea_id>", methods=["PUT"], endpoint="api_update_idea")
    @login_required
    @json_api
    def api_update_idea(idea_id: int):
        data = request_data()
        idea = svc.update_by_author(
            user_id=current_user_id(), idea_id=idea_id, data=_idea_input(data), proposal=data.get("proposal")
        )
        return json_ok(idea.to_dict(), message="Project idea updated")

    @app.route("/api/project-ideas/<int:idea_id>/submit", methods=["POST"], endpoint="api_submit_idea")
    @login_required
    @json_api
    def api_submit_idea(idea_id: int):
        idea = svc.submit_for_review(user_id=current_user_id(), idea_id=idea_id)
        return json_ok(idea.to_dict(), message="Submitted for review")

    @app.route("/api/project-ideas/<int:idea_id>", methods=["DELETE"], endpoint="api_delete_idea")
    @login_required
    @json_api
    def api_delete_idea(idea_id: int):
        svc.delete(user_id=current_user_id(), current_role=current_role(), idea_id=idea_id)
        return json_ok(message="Project idea deleted")

    @app.route("/api/admin/project-ideas", methods=["GET"], endpoint="api_review_queue")
    @admin_required
    @json_api
    def api_review_queue():
        return json_ok([i.to_dict() for i in svc.list_for_review(current_role=current_role())])

    @app.route("/api/admin/project-ideas/<int:idea_id>/review", methods=["POST"], endpoint="api_review_idea")
    @admin_required
    @json_api
    def api_review_idea(idea_id: int):
        data = request_data()
        try:
            decision = ProjectIdeaStatus(data.get("decision", ""))
        except ValueError:
            raise ValidationError("Decision must be approved, declined or needs_revision")
        idea = svc.review(
            current_role=current_role(),
            reviewer_id=current_user_id(),
            idea_id=idea_id,
            decision=decision,
            comment=data.get("comment"),
        )
        return json_ok(idea.to_dict(), message=f"Idea marked {decision.value}")
