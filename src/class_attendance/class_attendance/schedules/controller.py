from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import flag_arg, json_body
from ..container import Container
from .model import ConflictResult, SlotWriteResult, slot_kwargs_from_payload


def _conflict_payload(result: ConflictResult) -> dict:
    return {"hasConflict": result.has_conflict, "conflicts": [s.to_dict() for s in result.conflicts]}


def _write_payload(result: SlotWriteResult) -> dict:
    return {
        "slot": result.slot.to_dict(),
        "hasConflict": result.has_conflict,
        "conflicts": [s.to_dict() for s in result.conflicts],
    }


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service

    @app.route("/api/schedule", methods=["GET"], endpoint="schedule_list")
    def schedule_list():
        group_id = request.args.get("groupId")
        teacher_id = request.args.get("teacherId")
        subject_id = request.args.get("subjectId")
        day = request.args.get("day")

        if day:
            slots = service.slots_for_day(day, group_id=group_id, teacher_id=teacher_id)
        elif group_id:
            slots = service.slots_for_group(group_id)
        elif teacher_id:
            slots = service.slots_for_teacher(teacher_id)
        elif subject_id:
            slots = service.slots_for_subject(subject_id)
        else:
            slots = service.list_slots(active_only=not flag_arg("includeInactive"))
        return jsonify([s.to_dict() for s in slots])

    @app.route("/api/schedule", methods=["POST"], endpoint="schedule_create")
    def schedule_create():
        body = json_body()
        result = service.create_slot(
            **slot_kwargs_from_payload(body),
            block_on_conflict=bool(body.get("blockOnConflict", False)),
        )
        return jsonify(_write_payload(result)), 201

    @app.route("/api/schedule/check-conflict", methods=["POST"], endpoint="schedule_check_conflict")
    def schedule_check_conflict():
        body = json_body()
        result = service.check_conflict(
            day_of_week=body.get("dayOfWeek"),
            start_time=body.get("startTime"),
            end_time=body.get("endTime"),
            group_id=body.get("groupId"),
            teacher_id=body.get("teacherId"),
            classroom=body.get("classroom"),
            exclude_id=body.get("excludeId"),
        )
        return jsonify(_conflict_payload(result))

    @app.route("/api/schedule/stats", methods=["GET"], endpoint="schedule_stats")
    def schedule_stats():
        stats = service.schedule_stats()
        return jsonify(
            {
                "total": stats.total,
                "active": stats.active,
                "inactive": stats.inactive,
                "byDay": stats.by_day,
                "byParity": stats.by_parity,
                "hoursPerWeek": stats.hours_per_week,
            }
        )

    @app.route("/api/schedule/import", methods=["POST"], endpoint="schedule_import")
    def schedule_import():
        rows = json_body().get("rows") or []
        result = service.import_slots(rows)
        return jsonify({"created": result.created, "errors": result.errors})

    @app.route("/api/schedule/<slot_id>", methods=["GET"], endpoint="schedule_get")
    def schedule_get(slot_id: str):
        return jsonify(service.get_slot(slot_id).to_dict())

    @app.route("/api/schedule/<slot_id>", methods=["PUT"], endpoint="schedule_update")
    def schedule_update(slot_id: str):
        body = json_body()
        result = service.update_slot(
            slot_id,
            block_on_conflict=bool(body.get("blockOnConflict", False)),
            **slot_kwargs_from_payload(body),
        )
        return jsonify(_write_payload(result))

    @app.route("/api/schedule/<slot_id>/deactivate", methods=["POST"], endpoint="schedule_deactivate")
    def schedule_deactivate(slot_id: str):
        return jsonify(service.deactivate_slot(slot_id).to_dict())

    @app.route("/api/schedule/<slot_id>/activate", methods=["POST"], endpoint="schedule_activate")
    def schedule_activate(slot_id: str):
        return jsonify(service.activate_slot(slot_id).to_dict())

    @app.route("/api/schedule/<slot_id>", methods=["DELETE"], endpoint="schedule_delete")
    def schedule_delete(slot_id: str):
        service.delete_slot(slot_id)
        return "", 204
