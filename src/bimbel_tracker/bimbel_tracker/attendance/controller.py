from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_user, login_required
from ..container import Container
from ..core.constants import LOCATION_OPTIONS
from ..core.exceptions import ValidationError
from .time_slots import generate_time_slots


def register(app: Flask, container: Container) -> None:
    def draft_session():
        user = current_user()
        return container.draft_sessions.get_or_create(
            user.name,
            tutor_name=user.name,
            enable_tutor_selection=user.is_admin,
            allow_manual_date=user.is_admin,
        )

    @app.route("/api/attendance/time-slots", methods=["GET"], endpoint="attendance_time_slots")
    @login_required
    def attendance_time_slots():
        slots = generate_time_slots(request.args.get("level", ""))
        return jsonify({"success": True, "slots": [s.to_dict() for s in slots]})

    @app.route("/api/attendance/options", methods=["GET"], endpoint="attendance_options")
    @login_required
    def attendance_options():
        drafts = draft_session()
        students = drafts.student_options(request.args.get("search", ""))
        return jsonify(
            {
                "success": True,
                "classes": drafts.class_options(),
                "locations": list(LOCATION_OPTIONS),
                "students": [{"name": s.name, "status": s.status.value} for s in students],
            }
        )

    @app.route("/api/attendance/draft/session", methods=["GET"], endpoint="draft_get")
    @login_required
    def draft_get():
        return jsonify({"success": True, **draft_session().snapshot()})

    @app.route("/api/attendance/draft/session", methods=["PATCH"], endpoint="draft_update_session")
    @login_required
    def draft_update_session():
        drafts = draft_session()
        data = request.get_json(silent=True) or {}
        drafts.update_session(data)
        return jsonify({"success": True, **drafts.snapshot()})

    @app.route("/api/attendance/draft/time-slot", methods=["POST"], endpoint="draft_time_slot")
    @login_required
    def draft_time_slot():
        drafts = draft_session()
        data = request.get_json(silent=True) or {}
        drafts.select_time_slot(data.get("value", ""))
        return jsonify({"success": True, **drafts.snapshot()})

    @app.route("/api/attendance/draft/custom-time", methods=["POST"], endpoint="draft_custom_time")
    @login_required
    def draft_custom_time():
        drafts = draft_session()
        data = request.get_json(silent=True) or {}
        if data.get("enabled", True):
            drafts.set_custom_time(data.get("time_start", ""), data.get("time_end", ""))
        else:
            drafts.use_preset_time()
        return jsonify({"success": True, **drafts.snapshot()})

    @app.route("/api/attendance/draft/entries", methods=["POST"], endpoint="draft_add_entry")
    @login_required
    def draft_add_entry():
        drafts = draft_session()
        data = request.get_json(silent=True) or {}
        name = drafts.select_student(data.get("student_name", ""))
        entry = drafts.add_entry(name, data.get("notes", ""))
        return jsonify({"success": True, "entry": entry.to_dict(), **drafts.snapshot()}), 201

    @app.route("/api/attendance/draft/entries/<local_id>", methods=["DELETE"], endpoint="draft_remove_entry")
    @login_required
    def draft_remove_entry(local_id: str):
        drafts = draft_session()
        drafts.remove_entry(local_id)
        return jsonify({"success": True, **drafts.snapshot()})

    @app.route("/api/attendance/draft/new-session", methods=["POST"], endpoint="draft_new_session")
    @login_required
    def draft_new_session():
        drafts = draft_session()
        data = request.get_json(silent=True) or {}
        if not drafts.start_new_session(confirmed=bool(data.get("confirmed"))):
            return jsonify(
                {
                    "success": False,
                    "confirm_required": True,
                    "message": "Sesi saat ini masih memiliki draft. Yakin ingin mulai sesi baru?",
                }
            ), 409
        return jsonify({"success": True, **drafts.snapshot()})

    @app.route("/api/attendance/draft/commit", methods=["POST"], endpoint="draft_commit")
    @login_required
    def draft_commit():
        drafts = draft_session()
        result = drafts.commit()
        return jsonify(
            {
                "success": True,
                "count": result.count,
                "message": f"Berhasil menyimpan {result.count} data presensi!",
                "results": [r.to_dict() for r in result.results],
            }
        )

    @app.route("/api/attendance/records", methods=["GET"], endpoint="records_list")
    @login_required
    def records_list():
        user = current_user()
        args = request.args
        try:
            month = int(args["month"]) if args.get("month") else None
            year = int(args["year"]) if args.get("year") else None
            limit = int(args["limit"]) if args.get("limit") else None
        except ValueError:
            raise ValidationError("Parameter angka tidak valid")
        filters = container.attendance_service.build_filters(
            tutor=args.get("tutor"),
            class_type=args.get("class_type"),
            education_level=args.get("education_level"),
            location=args.get("location"),
            student_name=args.get("student_name"),
            month=month,
            year=year,
            limit=limit,
        )
        records = container.attendance_service.list_records(filters, current_role=user.role, current_name=user.name)
        return jsonify({"success": True, "records": [r.to_dict() for r in records]})

    @app.route("/api/attendance/records/<int:record_id>", methods=["PATCH"], endpoint="records_update")
    @login_required
    def records_update(record_id: int):
        user = current_user()
        data = request.get_json(silent=True) or {}
        record = container.attendance_service.update_record(
            record_id, data, current_role=user.role, current_name=user.name
        )
        return jsonify({"success": True, "record": record.to_dict()})

    @app.route("/api/attendance/records/<int:record_id>", methods=["DELETE"], endpoint="records_delete")
    @login_required
    def records_delete(record_id: int):
        user = current_user()
        container.attendance_service.delete_record(record_id, current_role=user.role, current_name=user.name)
        return jsonify({"success": True})

    @app.route("/api/attendance/records", methods=["DELETE"], endpoint="records_delete_all")
    @admin_required
    def records_delete_all():
        count = container.attendance_service.delete_all(current_role=current_user().role)
        return jsonify({"success": True, "deleted": count})
