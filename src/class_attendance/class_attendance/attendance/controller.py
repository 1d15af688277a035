from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import date_arg, json_body
from ..container import Container
from ..core.exceptions import ValidationError
from ..sessions.controller import session_ref_from_request
from .model import MarkWithStudent, RosterRow


def _student_payload(student) -> dict:
    return {"id": student.user_id, "name": student.name, "email": student.email}


def _mark_with_student(row: MarkWithStudent) -> dict:
    out = row.mark.to_dict()
    out["student"] = _student_payload(row.student)
    return out


def _roster_row(row: RosterRow) -> dict:
    return {
        "student": _student_payload(row.student),
        "mark": row.mark.to_dict() if row.mark else None,
        "inGroup": row.in_group,
    }


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/sessions/<session_id>/attendance", methods=["GET"], endpoint="attendance_for_session")
    def attendance_for_session(session_id: str):
        return jsonify([_mark_with_student(r) for r in service.attendance_for_session(session_id)])

    @app.route("/api/sessions/<session_id>/attendance", methods=["POST"], endpoint="attendance_bulk_mark")
    def attendance_bulk_mark(session_id: str):
        body = json_body()
        ref = session_ref_from_request(container, session_id, body)
        entries = body.get("entries") or []
        if not isinstance(entries, list):
            raise ValidationError("entries must be a list", field="entries")
        result = service.bulk_mark(ref, entries, marked_by=body.get("markedBy"))
        payload = {
            "marks": [m.to_dict() for m in result.marks],
            "failures": [{"studentId": f.student_id, "reason": f.reason} for f in result.failures],
        }
        # 207: some entries were written, some were not.
        return jsonify(payload), (200 if result.ok else 207)

    @app.route("/api/sessions/<session_id>/roster", methods=["GET"], endpoint="attendance_roster")
    def attendance_roster(session_id: str):
        return jsonify([_roster_row(r) for r in service.roster_for_session(session_id)])

    @app.route("/api/sessions/<session_id>/stats", methods=["GET"], endpoint="attendance_session_stats")
    def attendance_session_stats(session_id: str):
        return jsonify(service.stats_for_session(session_id).to_dict())

    @app.route("/api/students/<student_id>/attendance", methods=["GET"], endpoint="attendance_for_student")
    def attendance_for_student(student_id: str):
        statuses = [s for s in (request.args.get("status") or "").split(",") if s.strip()]
        marks = service.student_marks(
            student_id,
            date_from=date_arg("from"),
            date_to=date_arg("to"),
            statuses=statuses or None,
        )
        return jsonify([m.to_dict() for m in marks])

    @app.route("/api/students/<student_id>/stats", methods=["GET"], endpoint="attendance_student_stats")
    def attendance_student_stats(student_id: str):
        stats = service.stats_for_student(
            student_id,
            date_from=date_arg("from"),
            date_to=date_arg("to"),
            subject_id=request.args.get("subjectId"),
        )
        out = stats.to_dict()
        out["student"] = _student_payload(service.student_profile(student_id))
        return jsonify(out)

    @app.route("/api/attendance/<mark_id>", methods=["DELETE"], endpoint="attendance_delete")
    def attendance_delete(mark_id: str):
        service.delete_mark(mark_id)
        return "", 204
