from __future__ import annotations

from flask import Flask, render_template, session

from ..common.datetime_utils import parse_iso_date
from ..common.web import admin_required, current_role, current_user_id, json_api, json_ok, login_required, request_data
from ..core.enums import TaskPriority, TaskStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .service import TaskInput


def _task_input(data: dict) -> TaskInput:
    try:
        priority = TaskPriority(data.get("priority") or TaskPriority.MEDIUM.value)
    except ValueError:
        raise ValidationError("Priority must be low, medium or high")

    due_s = (data.get("due_date") or "").strip()
    try:
        due_date = parse_iso_date(due_s) if due_s else None
        assignees = data.get("assignee_ids") or []
        if isinstance(assignees, str):
            assignees = [a for a in assignees.split(",") if a.strip()]
        assignee_ids = [int(a) for a in assignees]
        event_id = int(data["event_id"]) if data.get("event_id") else None
    except ValueError:
        raise ValidationError("Invalid due date, assignee or event")

    return TaskInput(
        title=data.get("title", ""),
        description=data.get("description"),
        assignee_ids=assignee_ids,
        event_id=event_id,
        priority=priority,
        due_date=due_date,
    )


def register(app: Flask, container: Container) -> None:
    svc = container.task_service

    @app.route("/tasks", endpoint="tasks")
    @login_required
    def tasks_page():
        return render_template("tasks.html", board=svc.board(), active_page="tasks")

    @app.route("/api/tasks", methods=["GET"], endpoint="api_tasks")
    @login_required
    @json_api
    def api_tasks():
        board = svc.board()
        return json_ok({status: [t.to_dict() for t in items] for status, items in board.items()})

    @app.route("/api/tasks", methods=["POST"], endpoint="api_create_task")
    @admin_required
    @json_api
    def api_create_task():
        task = svc.create(current_role=current_role(), created_by=current_user_id(), data=_task_input(request_data()))
        return json_ok(task.to_dict(), 201, message="Task created")

    @app.route("/api/tasks/<int:task_id>", methods=["GET"], endpoint="api_task")
    @login_required
    @json_api
    def api_task(task_id: int):
        task = svc.get(task_id)
        comments = svc.list_comments(task_id)
        return json_ok({**task.to_dict(), "comments": [c.to_dict() for c in comments]})

    @app.route("/api/tasks/<int:task_id>", methods=["PUT"], endpoint="api_update_task")
    @admin_required
    @json_api
    def api_update_task(task_id: int):
        task = svc.update(current_role=current_role(), task_id=task_id, data=_task_input(request_data()))
        return json_ok(task.to_dict(), message="Task updated")

    @app.route("/api/tasks/<int:task_id>", methods=["DELETE"], endpoint="api_delete_task")
    @admin_required
    @json_api
    def api_delete_task(task_id: int):
        svc.delete(current_role=current_role(), task_id=task_id)
        return json_ok(message="Task deleted")

    @app.route("/api/tasks/<int:task_id>/status", methods=["POST"], endpoint="api_move_task")
    @login_required
    @json_api
    def api_move_task(task_id: int):
        try:
            status = TaskStatus(request_data().get("status", ""))
        except ValueError:
            raise ValidationError("Status must be todo, in_progress or done")
        task = svc.move(user_id=current_user_id(), current_role=current_role(), task_id=task_id, status=status)
        return json_ok(task.to_dict())

    @app.route("/api/tasks/<int:task_id>/checklist", methods=["POST"], endpoint="api_add_checklist_item")
    @login_required
    @json_api
    def api_add_checklist_item(task_id: int):
        task = svc.add_checklist_item(
            user_id=current_user_id(), current_role=current_role(), task_id=task_id, text=request_data().get("text", "")
        )
        return json_ok(task.to_dict(), 201)

    @app.route(
        "/api/tasks/<int:task_id>/checklist/<item_id>/toggle", methods=["POST"], endpoint="api_toggle_checklist_item"
    )
    @login_required
    @json_api
    def api_toggle_checklist_item(task_id: int, item_id: str):
        task = svc.toggle_checklist_item(
            user_id=current_user_id(), current_role=current_role(), task_id=task_id, item_id=item_id
        )
        return json_ok(task.to_dict())

    @app.route("/api/tasks/<int:task_id>/checklist/<item_id>", methods=["DELETE"], endpoint="api_remove_checklist_item")
    @login_required
    @json_api
    def api_remove_checklist_item(task_id: int, item_id: str):
        task = svc.remove_checklist_item(
            user_id=current_user_id(), current_role=current_role(), task_id=task_id, item_id=item_id
        )
        return json_ok(task.to_dict())

    @app.route("/api/tasks/<int:task_id>/comments", methods=["POST"], endpoint="api_add_task_comment")
    @login_required
    @json_api
    def api_add_task_comment(task_id: int):
        comment = svc.add_comment(
            task_id=task_id,
            author_id=current_user_id(),
            author_name=session.get("name", ""),
            body=request_data().get("body", ""),
        )
        return json_ok(comment.to_dict(), 201)
