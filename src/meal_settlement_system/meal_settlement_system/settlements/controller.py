from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import api_login_required, current_caller, error_response, money, parse_bool_arg, server_error
from ..common.validators import optional_id
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from ..payments.model import Payment
from .model import ChildSettlement, SettlementReport

logger = logging.getLogger(__name__)


def settlement_to_json(s: ChildSettlement) -> dict:
    return {
        "childId": s.child_id,
        "childName": s.child_name,
        "childSurname": s.child_surname,
        "groupId": s.group_id,
        "groupName": s.group_name,
        "cancellations": [
            {
                "id": line.cancellation_id,
                "date": line.meal_date.isoformat(),
                "mealType": line.meal_type.value,
                "mealPrice": money(line.meal_price),
                "refunded": line.refunded,
            }
            for line in s.cancellations
        ],
        "totalUnrefunded": money(s.total_unrefunded),
        "totalRefunded": money(s.total_refunded),
    }


def report_to_json(report: SettlementReport) -> dict:
    summary = report.summary
    return {
        "settlements": [settlement_to_json(s) for s in report.settlements],
        "summary": {
            "totalChildren": summary.total_children,
            "totalCancellations": summary.total_cancellations,
            "grandTotalUnrefunded": money(summary.grand_total_unrefunded),
            "grandTotalRefunded": money(summary.grand_total_refunded),
        },
    }


def payment_to_json(p: Payment) -> dict:
    return {
        "id": p.payment_id,
        "childId": p.child_id,
        "amount": money(p.amount),
        "description": p.description,
        "dueDate": p.due_date.isoformat(),
        "status": p.status.value,
        "paidDate": p.paid_date.isoformat() if p.paid_date else None,
    }


def register(app: Flask, container: Container) -> None:
    service = container.settlement_service

    @app.route("/api/settlements", methods=["GET"], endpoint="list_settlements")
    @api_login_required
    def list_settlements():
        try:
            report = service.list_settlements(
                current_caller(),
                start_date=parse_optional_date(request.args.get("startDate")),
                end_date=parse_optional_date(request.args.get("endDate")),
                group_id=optional_id(request.args.get("groupId"), "groupId"),
                child_id=optional_id(request.args.get("childId"), "childId"),
                only_unrefunded=bool(parse_bool_arg(request.args.get("onlyUnrefunded"))),
            )
            return jsonify(report_to_json(report))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error(logger, "GET /api/settlements")

    @app.route("/api/settlements", methods=["POST"], endpoint="settle_cancellations")
    @api_login_required
    def settle_cancellations():
        try:
            container.access_policy.require_manager(current_caller())
            data = request.get_json(silent=True) or {}
            action = data.get("action")
            ids = data.get("cancellationIds")

            if action == "refund":
                count = service.mark_refunded(current_caller(), ids)
                return jsonify({"message": f"Marked {count} cancellations as refunded", "count": count})

            if action == "generate_payment":
                payments = service.generate_reversing_payments(current_caller(), ids)
                return jsonify(
                    {
                        "message": f"Created {len(payments)} refunds",
                        "payments": [payment_to_json(p) for p in payments],
                    }
                )

            raise ValidationError(f"Unknown action: {action!r}")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error(logger, "POST /api/settlements")
