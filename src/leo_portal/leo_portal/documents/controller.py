from __future__ import annotations

from flask import Flask, abort, render_template, request, send_file

from ..common.web import admin_required, current_role, current_user_id, json_api, json_ok, login_required
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.document_service

    @app.route("/documents", endpoint="documents")
    @login_required
    def documents_page():
        return render_template("documents.html", documents=svc.list_documents(), active_page="documents")

    @app.route("/api/documents", methods=["GET"], endpoint="api_documents")
    @login_required
    @json_api
    def api_documents():
        return json_ok([d.to_dict() for d in svc.list_documents()])

    @app.route("/api/documents", methods=["POST"], endpoint="api_upload_document")
    @admin_required
    @json_api
    def api_upload_document():
        file = request.files.get("file")
        if not file:
            raise ValidationError("Choose a file to upload")
        doc = svc.upload(
            current_role=current_role(),
            uploaded_by=current_user_id(),
            name=request.form.get("name") or file.filename or "",
            file_name=file.filename or "",
            stream=file.stream,
            content_type=file.mimetype,
        )
        return json_ok(doc.to_dict(), 201, message="Document uploaded")

    @app.route("/documents/<int:document_id>/download", endpoint="download_document")
    @login_required
    def download_document(document_id: int):
        try:
            doc, path = svc.file_path(document_id)
        except NotFoundError:
            abort(404)
        return send_file(path, mimetype=doc.content_type, as_attachment=True, download_name=doc.file_name)

    @app.route("/api/documents/<int:document_id>", methods=["DELETE"], endpoint="api_delete_document")
    @admin_required
    @json_api
    def api_delete_document(document_id: int):
        svc.delete(current_role=current_role(), document_id=document_id)
        return json_ok(message="Document deleted")
