# routes/bulk_operations.py
"""CSV templates, dry-run previews and imports of delegates and staff."""

from __future__ import annotations

import os
from typing import Tuple

from flask import Blueprint, Response, jsonify, request

from domain.models.bulk_import import ParticipantKind
from middleware.auth import current_caller_id, login_required
from middleware.errors import ValidationError
from services.bulk_import_service import (
    ImportContent,
    build_template,
    execute_import,
    import_options,
    preview_import,
)
from utils.workbook import parse_workbook

bulk_bp = Blueprint("bulk", __name__)

ALLOWED_EXTENSIONS = {".csv", ".xlsx"}

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _as_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUE_VALUES


def _read_upload() -> Tuple[ImportContent, bool]:
    """Return the submitted content and the ``sendEmails`` flag.

    Accepts JSON ``{"csvContent": ..., "sendEmails": ...}`` or a multipart
    ``file`` (.csv or .xlsx) with an optional ``sendEmails`` form field.
    """
    upload = request.files.get("file")
    if upload and upload.filename:
        _, ext = os.path.splitext(upload.filename.lower())
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError("Unsupported file type. Please upload .csv or .xlsx.")
        send_emails = _as_bool(request.form.get("sendEmails"))
        if ext == ".xlsx":
            return parse_workbook(upload.stream), send_emails
        return upload.read().decode("utf-8-sig"), send_emails

    data = request.get_json(silent=True) or {}
    return data.get("csvContent"), _as_bool(data.get("sendEmails"))


@bulk_bp.get("/programs/<program_id>/bulk/template/<kind>")
@login_required
def download_template(program_id: str, kind: str):
    content = build_template(current_caller_id(), program_id, kind)
    filename = f"{ParticipantKind.parse(kind).plural}-template.csv"
    return Response(
        content,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@bulk_bp.get("/programs/<program_id>/bulk/options")
@bulk_bp.get("/programs/<program_id>/bulk/options/<kind>")
@login_required
def get_options(program_id: str, kind: str | None = None):
    return jsonify(import_options(current_caller_id(), program_id))


@bulk_bp.post("/program-years/<year_id>/bulk/preview/<kind>")
@login_required
def preview(year_id: str, kind: str):
    content, _ = _read_upload()
    result = preview_import(current_caller_id(), year_id, kind, content)
    return jsonify(result.to_dict())


@bulk_bp.post("/program-years/<year_id>/bulk/import/<kind>")
@login_required
def run_import(year_id: str, kind: str):
    content, send_emails = _read_upload()
    outcome = execute_import(current_caller_id(), year_id, kind, content, send_emails)
    return jsonify(outcome.to_dict())
