from __future__ import annotations

from flask import Blueprint, g

from api.deps import get_order_service
from api.responses import envelope
from models.schemas.order import OrderOutSchema, SalesSummaryOutSchema
from models.user import Role
from utils.decorators import jwt_required, roles_required

bp = Blueprint("orders", __name__)

orders_out_schema = OrderOutSchema(many=True)
sales_out_schema = SalesSummaryOutSchema()


@bp.get("/my-orders")
@jwt_required()
def my_orders():
    """
    Orders placed by the caller, newest first
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    responses:
      200:
        description: OK
    """
    orders = get_order_service().user_orders(g.identity.user_id)
    return envelope("Orders retrieved successfully", orders_out_schema.dump(orders))


@bp.get("/sales")
@jwt_required()
@roles_required([Role.ADMIN])
def sales():
    """
    All orders with revenue totals - admin
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      403:
        description: Not an admin
    """
    summary = get_order_service().sales_summary()
    return envelope("Sales data retrieved successfully", sales_out_schema.dump(summary))
