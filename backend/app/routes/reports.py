# Overview: Flask API routes for sales, expense and summary reports over civil-day ranges.

from flask import Blueprint, jsonify, request, g, current_app

from app.decorators import require_auth
from app.services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.errorhandler(403)
def forbidden(_error):
    return jsonify({"error": "Forbidden"}), 403


@reports_bp.get("/sales")
@require_auth
def sales_report():
    """
    Sales in a civil-day range.

    Query params: preset | start_date, end_date (YYYY-MM-DD), stall_id.
    Staff callers always get their own stall for today.
    """
    stall_id = request.args.get("stall_id", type=int)

    try:
        date_range = reporting_service.parse_report_range(request.args)
        report = reporting_service.sales_report(
            date_range=date_range,
            profile=g.current_profile,
            stall_id=stall_id,
        )
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception:
        current_app.logger.exception("Failed to build sales report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/expenses")
@require_auth
def expenses_report():
    stall_id = request.args.get("stall_id", type=int)

    try:
        date_range = reporting_service.parse_report_range(request.args)
        report = reporting_service.expenses_report(
            date_range=date_range,
            profile=g.current_profile,
            stall_id=stall_id,
        )
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception:
        current_app.logger.exception("Failed to build expenses report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/summary")
@require_auth
def summary_report():
    try:
        date_range = reporting_service.parse_report_range(request.args)
        report = reporting_service.summary_report(
            date_range=date_range,
            profile=g.current_profile,
        )
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception:
        current_app.logger.exception("Failed to build summary report")
        return jsonify({"error": "Internal server error"}), 500
