from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from models.db_storage import DBStorage
from models.order import Order, OrderItem
from services.dto import OrderLine, SalesSummary
from services.errors import ValidationFailedError

logger = logging.getLogger(__name__)


class OrderService:
    """Order history: records purchases and aggregates sales."""

    def __init__(self, storage: DBStorage) -> None:
        self.storage = storage

    @property
    def session(self):
        return self.storage.get_session()

    def create_order(self, user_id: str, lines: Iterable[OrderLine], *, commit: bool = True) -> Order:
        """
        Build an order with one item per line. With ``commit=False`` the
        order is only added to the session so a caller can commit it
        together with its own changes.
        """
        lines = list(lines)
        if not lines:
            raise ValidationFailedError("An order needs at least one item")

        order = Order(user_id=user_id, total_amount=Decimal("0"))
        total = Decimal("0")
        for line in lines:
            price = Decimal(line.price)
            order.items.append(
                OrderItem(sweet_id=line.sweet_id, name=line.name, quantity=line.quantity, price=price)
            )
            total += price * line.quantity
        order.total_amount = total

        self.storage.new(order)
        if commit:
            self.storage.save()
        return order

    def user_orders(self, user_id: str) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .options(selectinload(Order.items))
            .order_by(Order.created_at.desc())
        )
        return list(self.session.scalars(stmt))

    def all_orders(self) -> list[Order]:
        stmt = (
            select(Order)
            .options(selectinload(Order.items), selectinload(Order.user))
            .order_by(Order.created_at.desc())
        )
        return list(self.session.scalars(stmt))

    def sales_summary(self) -> SalesSummary:
        orders = self.all_orders()
        revenue = sum((Decimal(o.total_amount) for o in orders), Decimal("0"))
        return SalesSummary(orders=orders, total_revenue=revenue, total_orders=len(orders))
