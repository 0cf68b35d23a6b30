from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import api_login_required, current_caller, error_response, money, parse_bool_arg, server_error
from ..common.validators import optional_id
from ..core.exceptions import DomainError
from ..container import Container
from .model import CancellationView

logger = logging.getLogger(__name__)


def cancellation_to_json(v: CancellationView) -> dict:
    c = v.cancellation
    return {
        "id": c.cancellation_id,
        "childId": c.child_id,
        "date": c.meal_date.isoformat(),
        "mealType": c.meal_type.value,
        "reason": c.reason,
        "refunded": c.refunded,
        "createdAt": c.created_at.isoformat() if c.created_at else None,
        "mealPrice": money(v.meal_price),
        "child": {
            "id": c.child_id,
            "name": v.child_name,
            "surname": v.child_surname,
            "group": {"id": v.group_id, "name": v.group_name} if v.group_id else None,
        },
    }


def register(app: Flask, container: Container) -> None:
    service = container.meal_cancellation_service

    @app.route("/api/menu/cancellations", methods=["GET"], endpoint="list_meal_cancellations")
    @api_login_required
    def list_meal_cancellations():
        try:
            views = service.list_cancellations(
                current_caller(),
                child_id=optional_id(request.args.get("childId"), "childId"),
                start_date=parse_optional_date(request.args.get("startDate")),
                end_date=parse_optional_date(request.args.get("endDate")),
                refunded=parse_bool_arg(request.args.get("refunded")),
            )
            return jsonify([cancellation_to_json(v) for v in views])
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error(logger, "GET /api/menu/cancellations")

    @app.route("/api/menu/cancellations", methods=["POST"], endpoint="cancel_meal")
    @api_login_required
    def cancel_meal():
        try:
            data = request.get_json(silent=True) or {}
            view = service.cancel_meal(
                current_caller(),
                child_id=data.get("childId"),
                meal_date=data.get("date"),
                meal_type=data.get("mealType"),
                reason=data.get("reason"),
            )
            return jsonify(cancellation_to_json(view)), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error(logger, "POST /api/menu/cancellations")

    @app.route("/api/menu/cancellations", methods=["DELETE"], endpoint="uncancel_meal")
    @api_login_required
    def uncancel_meal():
        try:
            service.uncancel_meal(current_caller(), request.args.get("id"))
            return jsonify({"success": True, "message": "Cancellation removed"})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error(logger, "DELETE /api/menu/cancellations")
