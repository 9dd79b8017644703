"""Random balanced placement of delegates into groupings and parties."""

from __future__ import annotations

from flask import Blueprint, jsonify

from middleware.auth import current_caller_id, login_required
from services.assignment_service import commit_assignment, preview_assignment

delegate_assignment_bp = Blueprint("delegate_assignment", __name__)


@delegate_assignment_bp.post("/program-years/<year_id>/delegates/assign/preview")
@login_required
def assignment_preview(year_id: str):
    return jsonify(preview_assignment(current_caller_id(), year_id).to_dict())


@delegate_assignment_bp.post("/program-years/<year_id>/delegates/assign")
@login_required
def assignment_commit(year_id: str):
    return jsonify(commit_assignment(current_caller_id(), year_id).to_dict())
