from __future__ import annotations

import csv
import io
from datetime import date, timedelta

from flask import Flask, g, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..core.app_logger import get_logger
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.enums import Role
from ..container import Container
from .service import EXPORT_FIELDS, ReportData

logger = get_logger(__name__)


class _BadQuery(Exception):
    pass


def _query_date(name: str, default=None):
    value = request.args.get(name)
    if not value:
        return default
    try:
        return parse_iso_date(value)
    except ValueError:
        raise _BadQuery(f"{name} must be a date in YYYY-MM-DD format") from None


def _date_range() -> tuple[date, date]:
    end = _query_date("end_date", now_local().date())
    start = _query_date("start_date", end - timedelta(days=DEFAULT_REPORT_DAYS))
    if start > end:
        raise _BadQuery("start_date must not be after end_date")
    return start, end


def _report_json(data: ReportData, rows_key: str = "records"):
    return jsonify({"success": True, "data": {rows_key: data.rows, "summary": data.summary}}), 200


def register(app: Flask, container: Container) -> None:
    role_required = container.role_required
    reports = container.report_service

    def _write_report_csv(*, rows, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=EXPORT_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    def _guarded(view_name: str, build):
        try:
            return build()
        except _BadQuery as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("%s failed", view_name)
            return jsonify({"success": False, "message": "Error fetching attendance"}), 500

    @app.route("/api/attendance/my-attendance", methods=["GET"], endpoint="my_attendance")
    @role_required(Role.STUDENT)
    def my_attendance():
        def build():
            start, end = _date_range()
            data = reports.student_report(student_id=g.principal.user_id, start=start, end=end)
            return _report_json(data)

        return _guarded("my-attendance", build)

    @app.route("/api/attendance/my-report", methods=["GET"], endpoint="my_report")
    @role_required(Role.STUDENT)
    def my_report():
        def build():
            start, end = _date_range()
            data = reports.student_report(student_id=g.principal.user_id, start=start, end=end)
            return jsonify({"success": True, "data": data.summary}), 200

        return _guarded("my-report", build)

    @app.route("/api/attendance/class-attendance", methods=["GET"], endpoint="class_attendance")
    @role_required(Role.TEACHER)
    def class_attendance():
        def build():
            data = reports.class_attendance(
                teacher_id=g.principal.user_id,
                day=_query_date("date"),
                subject=request.args.get("subject") or None,
                class_name=request.args.get("class") or None,
            )
            return _report_json(data)

        return _guarded("class-attendance", build)

    @app.route("/api/attendance/subject-report", methods=["GET"], endpoint="subject_report")
    @role_required(Role.TEACHER)
    def subject_report():
        subject = (request.args.get("subject") or "").strip()
        if not subject:
            return jsonify({"success": False, "message": "Subject is required"}), 400

        def build():
            data = reports.subject_report(
                institution_code=g.principal.institution_code,
                subject=subject,
                teacher_id=g.principal.user_id,
                start=_query_date("start_date"),
                end=_query_date("end_date"),
            )
            return _report_json(data, rows_key="students")

        return _guarded("subject-report", build)

    @app.route("/api/attendance/daily-summary", methods=["GET"], endpoint="daily_summary")
    @role_required(Role.TEACHER)
    def daily_summary():
        def build():
            day = _query_date("date", now_local().date())
            data = reports.daily_summary(teacher_id=g.principal.user_id, day=day)
            return _report_json(data, rows_key="sessions")

        return _guarded("daily-summary", build)

    @app.route("/api/attendance/my-work-hours", methods=["GET"], endpoint="my_work_hours")
    @role_required(Role.TEACHER)
    def my_work_hours():
        def build():
            start, end = _date_range()
            data = reports.teacher_work_summary(teacher_id=g.principal.user_id, start=start, end=end)
            return _report_json(data, rows_key="days")

        return _guarded("my-work-hours", build)

    @app.route("/api/attendance/institution-report", methods=["GET"], endpoint="institution_report")
    @role_required(Role.INSTITUTION)
    def institution_report():
        def build():
            start, end = _date_range()
            data = reports.institution_report(
                institution_code=g.principal.institution_code, start=start, end=end
            )
            return _report_json(data, rows_key="classes")

        return _guarded("institution-report", build)

    @app.route("/api/attendance/export", methods=["GET"], endpoint="attendance_export")
    @role_required(Role.INSTITUTION)
    def attendance_export():
        def build():
            start, end = _date_range()
            code = g.principal.institution_code
            rows = reports.export_rows(institution_code=code, start=start, end=end)
            filename = f"attendance_{code}_{start:%Y%m%d}_{end:%Y%m%d}.csv"
            return _write_report_csv(rows=rows, filename=filename)

        return _guarded("export", build)
