from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.web import admin_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payments", methods=["GET"], endpoint="payments_overview")
    @admin_required
    def payments_overview():
        today = date.today()
        overview = container.payment_service.monthly_overview(
            month=request.args.get("month", today.month),
            year=request.args.get("year", today.year),
            search=request.args.get("search", ""),
            status_filter=request.args.get("status", "all"),
        )
        return jsonify({"success": True, **overview.to_dict()})

    @app.route("/api/payments/<int:student_id>", methods=["GET"], endpoint="payments_detail")
    @admin_required
    def payments_detail(student_id: int):
        months = container.payment_service.student_year_detail(
            student_id=student_id,
            year=request.args.get("year", date.today().year),
        )
        return jsonify({"success": True, "student_id": student_id, "months": months})

    @app.route("/api/payments/<int:student_id>", methods=["PUT"], endpoint="payments_record")
    @admin_required
    def payments_record(student_id: int):
        data = request.get_json(silent=True) or {}
        status = container.payment_service.record_payment(
            student_id=student_id,
            month=data.get("month"),
            year=data.get("year"),
            payment_date=data.get("payment_date") or "",
        )
        return jsonify({"success": True, **status.to_dict()})
