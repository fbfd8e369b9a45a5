from __future__ import annotations

import io

from flask import Flask, g, jsonify, request, send_file

from ..attendance.model import AttendanceRecord
from ..core.app_logger import get_logger
from ..core.enums import RedemptionOutcome, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container
from ..sessions.qr_image import render_qr_base64, render_qr_png
from .model import IssuedToken, RedemptionResult

logger = get_logger(__name__)

_STATUS_BY_OUTCOME = {
    RedemptionOutcome.MARKED: 200,
    RedemptionOutcome.ALREADY_MARKED: 200,
    RedemptionOutcome.CHECKED_IN: 200,
    RedemptionOutcome.CHECKED_OUT: 200,
    RedemptionOutcome.INVALID_TOKEN: 401,
    RedemptionOutcome.WRONG_TOKEN_KIND: 400,
    RedemptionOutcome.ALREADY_COMPLETED: 400,
    RedemptionOutcome.NOT_FOUND: 404,
}


def _fmt(value):
    return value.isoformat() if value else None


def record_to_json(record: AttendanceRecord) -> dict:
    return {
        "id": record.record_id,
        "type": record.attendance_type.value,
        "session_id": record.session_id,
        "teacher_id": record.teacher_id,
        "student_id": record.student_id,
        "institution_code": record.institution_code,
        "subject": record.subject,
        "class": record.class_name,
        "section": record.section,
        "period": record.period,
        "status": record.status.value,
        "late_minutes": record.late_minutes,
        "date": record.attendance_date.isoformat(),
        "scan_time": _fmt(record.scan_time),
        "check_in": _fmt(record.check_in),
        "check_out": _fmt(record.check_out),
        "work_hours": record.work_hours,
        "remarks": record.remarks,
        "marked_by": record.marked_by,
    }


def result_response(result: RedemptionResult):
    data = {"outcome": result.outcome.value}
    if result.reason:
        data["reason"] = result.reason
    if result.action is not None:
        data["action"] = result.action.value
    if result.record is not None:
        data["attendance"] = record_to_json(result.record)
    status = _STATUS_BY_OUTCOME.get(result.outcome, 500)
    return jsonify({"success": result.ok, "message": result.message, "data": data}), status


def register(app: Flask, container: Container) -> None:
    role_required = container.role_required
    redemption = container.redemption_service

    def _issued_response(issued: IssuedToken, message: str):
        if request.args.get("format", "").lower() == "png":
            return send_file(
                io.BytesIO(render_qr_png(issued.token)),
                mimetype="image/png",
                download_name=f"qr-{issued.session_id}.png",
            )

        claim = issued.claim
        data = {
            "token": issued.token,
            "qr_code": "data:image/png;base64," + render_qr_base64(issued.token),
            "session_id": issued.session_id,
            "kind": claim.kind.value,
            "issued_at": claim.issued_at.isoformat(),
            "expires_at": issued.expires_at.isoformat(),
            "expires_in": issued.ttl_seconds,
        }
        if hasattr(claim, "subject"):
            data.update(
                {
                    "subject": claim.subject,
                    "class": claim.class_name,
                    "section": claim.section,
                    "period": claim.period,
                }
            )
        return jsonify({"success": True, "message": message, "data": data}), 200

    @app.route("/api/qr/generate", methods=["POST"], endpoint="qr_generate")
    @role_required(Role.TEACHER)
    def qr_generate():
        data = request.get_json(silent=True) or {}
        principal = g.principal
        try:
            issued = redemption.issue_class_token(
                principal.user_id,
                data.get("subject"),
                data.get("class") or data.get("class_name"),
                section=data.get("section"),
                period=data.get("period"),
                institution_code=principal.institution_code,
                ttl_seconds=data.get("ttl_seconds"),
            )
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except NotFoundError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except ValueError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("class token generation failed")
            return jsonify({"success": False, "message": "Error generating QR code"}), 500
        return _issued_response(issued, "QR code generated successfully")

    @app.route("/api/qr/teacher/generate", methods=["POST"], endpoint="qr_teacher_generate")
    @role_required(Role.TEACHER)
    def qr_teacher_generate():
        principal = g.principal
        try:
            issued = redemption.issue_teacher_self_token(principal.user_id, principal.institution_code)
        except NotFoundError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except Exception:
            logger.exception("teacher token generation failed")
            return jsonify({"success": False, "message": "Error generating teacher QR code"}), 500
        return _issued_response(issued, "Teacher QR code generated successfully")

    @app.route("/api/qr/scan", methods=["POST"], endpoint="qr_scan")
    @role_required(Role.STUDENT)
    def qr_scan():
        data = request.get_json(silent=True) or {}
        token = str(data.get("token") or data.get("qrToken") or data.get("qr_data") or "").strip()
        if not token:
            return jsonify({"success": False, "message": "QR data is required"}), 400

        principal = g.principal
        try:
            result = redemption.redeem_class_token(token, principal.user_id, marked_by=principal.subject)
        except Exception:
            logger.exception("class token redemption failed")
            return jsonify({"success": False, "message": "Error marking attendance"}), 500
        return result_response(result)

    @app.route("/api/qr/teacher/scan", methods=["POST"], endpoint="qr_teacher_scan")
    @role_required(Role.TEACHER, Role.INSTITUTION)
    def qr_teacher_scan():
        data = request.get_json(silent=True) or {}
        token = str(data.get("token") or data.get("qrToken") or data.get("qr_data") or "").strip()
        if not token:
            return jsonify({"success": False, "message": "QR data is required"}), 400

        scanned_by = data.get("scanned_by") or "qr_scanner"
        try:
            result = redemption.redeem_teacher_self_token(
                token, scanned_by=scanned_by, scanner_institution=g.principal.institution_code
            )
        except Exception:
            logger.exception("teacher token redemption failed")
            return jsonify({"success": False, "message": "Error processing teacher attendance"}), 500
        return result_response(result)
