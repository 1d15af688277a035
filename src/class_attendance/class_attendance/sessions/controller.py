from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import date_arg, flag_arg, json_body
from ..core.exceptions import ValidationError
from ..container import Container
from .materializer import is_virtual_id
from .model import SessionOwner
from .service import SessionRef


def session_ref_from_request(container: Container, session_id: str, body: dict) -> SessionRef:
    """A persisted id, or a virtual session rebuilt from recurringSlotId + date.

    A virtual id alone is enough once the session has been written to; before
    that the caller must name the slot and date it came from.
    """
    slot_id = body.get("recurringSlotId")
    if not (is_virtual_id(session_id) and slot_id):
        return session_id

    virtual = container.session_service.virtual_for(
        slot_id=slot_id,
        session_date=date_arg("date", required=True, source=body),
    )
    if virtual.session_id != session_id:
        raise ValidationError("sessionId does not match recurringSlotId and date", field="sessionId")
    return virtual


def _owner_from(source) -> SessionOwner:
    return SessionOwner(teacher_id=source.get("teacherId") or None, group_id=source.get("groupId") or None)


def register(app: Flask, container: Container) -> None:
    service = container.session_service

    def _render(sessions):
        if flag_arg("details"):
            return [d.to_dict() for d in service.with_details(sessions)]
        return [s.to_dict() for s in sessions]

    @app.route("/api/sessions", methods=["GET"], endpoint="sessions_for_date")
    def sessions_for_date():
        session_date = date_arg("date", required=True)
        sessions = service.sessions_for_date(_owner_from(request.args), session_date)
        return jsonify(_render(sessions))

    @app.route("/api/sessions/range", methods=["GET"], endpoint="sessions_for_range")
    def sessions_for_range():
        start = date_arg("from", required=True)
        end = date_arg("to", required=True)
        by_day = container.materializer.sessions_for_range(_owner_from(request.args), start, end)
        return jsonify({d.strftime("%Y-%m-%d"): _render(items) for d, items in by_day.items()})

    @app.route("/api/sessions/history", methods=["GET"], endpoint="sessions_history")
    def sessions_history():
        sessions = service.history(
            date_from=date_arg("from"),
            date_to=date_arg("to"),
            teacher_id=request.args.get("teacherId"),
            group_id=request.args.get("groupId"),
            subject_id=request.args.get("subjectId"),
        )
        return jsonify(_render(sessions))

    @app.route("/api/sessions", methods=["POST"], endpoint="sessions_create_adhoc")
    def sessions_create_adhoc():
        body = json_body()
        session, result = service.create_adhoc_session(
            subject_id=body.get("subjectId"),
            group_id=body.get("groupId"),
            teacher_id=body.get("teacherId"),
            session_date=date_arg("date", required=True, source=body),
            start_time=body.get("startTime"),
            end_time=body.get("endTime"),
            classroom=body.get("classroom") or "",
            topic=body.get("topic"),
            block_on_conflict=bool(body.get("blockOnConflict", False)),
        )
        return (
            jsonify(
                {
                    "session": session.to_dict(),
                    "hasConflict": result.has_conflict,
                    "conflicts": [s.to_dict() for s in result.conflicts],
                }
            ),
            201,
        )

    @app.route("/api/sessions/persist", methods=["POST"], endpoint="sessions_persist_period")
    def sessions_persist_period():
        body = json_body()
        created = service.persist_period(
            _owner_from(body),
            date_arg("from", required=True, source=body),
            date_arg("to", required=True, source=body),
        )
        return jsonify([s.to_dict() for s in created])

    @app.route("/api/sessions/<session_id>", methods=["GET"], endpoint="sessions_get")
    def sessions_get(session_id: str):
        return jsonify(service.resolve(session_id).to_dict())

    @app.route("/api/sessions/<session_id>/complete", methods=["POST"], endpoint="sessions_complete")
    def sessions_complete(session_id: str):
        ref = session_ref_from_request(container, session_id, json_body())
        return jsonify(service.complete(ref).to_dict())

    @app.route("/api/sessions/<session_id>/cancel", methods=["POST"], endpoint="sessions_cancel")
    def sessions_cancel(session_id: str):
        body = json_body()
        ref = session_ref_from_request(container, session_id, body)
        return jsonify(service.cancel(ref, notes=body.get("notes")).to_dict())

    @app.route("/api/sessions/<session_id>/details", methods=["PATCH"], endpoint="sessions_update_details")
    def sessions_update_details(session_id: str):
        body = json_body()
        ref = session_ref_from_request(container, session_id, body)
        return jsonify(service.update_details(ref, topic=body.get("topic"), notes=body.get("notes")).to_dict())
