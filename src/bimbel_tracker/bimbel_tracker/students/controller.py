from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students", methods=["GET"], endpoint="students_list")
    @admin_required
    def students_list():
        include_deleted = request.args.get("include_deleted") in ("1", "true")
        students = container.student_service.list_students(include_deleted=include_deleted)
        return jsonify({"success": True, "students": [s.to_dict() for s in students]})

    @app.route("/api/students", methods=["POST"], endpoint="students_create")
    @admin_required
    def students_create():
        data = request.get_json(silent=True) or {}
        student = container.student_service.create_student(data)
        return jsonify({"success": True, "message": "Siswa berhasil ditambahkan", "student": student.to_dict()}), 201

    @app.route("/api/students/<int:student_id>", methods=["PATCH"], endpoint="students_update")
    @admin_required
    def students_update(student_id: int):
        data = request.get_json(silent=True) or {}
        student = container.student_service.update_student(student_id, data)
        return jsonify({"success": True, "message": "Data siswa berhasil diperbarui", "student": student.to_dict()})

    @app.route("/api/students/<int:student_id>/registration-date", methods=["PUT"], endpoint="students_registration")
    @admin_required
    def students_registration(student_id: int):
        data = request.get_json(silent=True) or {}
        new_date = container.payment_service.update_registration_date(
            student_id=student_id,
            registration_date=data.get("registration_date"),
        )
        return jsonify({"success": True, "registration_date": new_date.isoformat()})

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="students_delete")
    @admin_required
    def students_delete(student_id: int):
        container.student_service.soft_delete(student_id)
        return jsonify({"success": True})

    @app.route("/api/students/<int:student_id>/restore", methods=["POST"], endpoint="students_restore")
    @admin_required
    def students_restore(student_id: int):
        container.student_service.restore(student_id)
        return jsonify({"success": True})

    @app.route("/api/students/<int:student_id>/permanent", methods=["DELETE"], endpoint="students_hard_delete")
    @admin_required
    def students_hard_delete(student_id: int):
        container.student_service.hard_delete(student_id)
        return jsonify({"success": True})
