from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from models.db_storage import DBStorage
from models.sweet import Sweet
from services.dto import OrderLine
from services.errors import InsufficientStockError, NotFoundError, PersistenceError, ValidationFailedError
from services.orders import OrderService

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "category", "price", "quantity", "description")


def _positive_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationFailedError("Quantity must be a positive integer")
    return quantity


class SweetService:
    """
    Inventory of sweets: CRUD plus the stock-moving purchase and restock.

    Input shape (lengths, categories, non-negative numbers) is validated by
    the marshmallow schemas before reaching this class.
    """

    def __init__(self, storage: DBStorage, orders: OrderService | None = None) -> None:
        self.storage = storage
        self.orders = orders or OrderService(storage)

    @property
    def session(self):
        return self.storage.get_session()

    def create(self, data: dict) -> Sweet:
        sweet = Sweet(**{k: data[k] for k in UPDATABLE_FIELDS if k in data})
        self.storage.new(sweet)
        self.storage.save()
        logger.info("sweet created id=%s", sweet.id)
        return sweet

    def list_all(self) -> list[Sweet]:
        return list(self.session.scalars(select(Sweet).order_by(Sweet.created_at.desc())))

    def get(self, sweet_id: str) -> Sweet:
        sweet = self.storage.get(Sweet, sweet_id)
        if sweet is None:
            raise NotFoundError("Sweet not found")
        return sweet

    def update(self, sweet_id: str, data: dict) -> Sweet:
        sweet = self.get(sweet_id)
        for field in UPDATABLE_FIELDS:
            if field in data:
                setattr(sweet, field, data[field])
        self.storage.save()
        return sweet

    def delete(self, sweet_id: str) -> None:
        sweet = self.get(sweet_id)
        self.storage.delete(sweet)
        self.storage.save()
        logger.info("sweet deleted id=%s", sweet_id)

    def purchase(self, sweet_id: str, user_id: str, quantity: int) -> Sweet:
        """
        Take ``quantity`` units out of stock and record the order, in one
        transaction: either both happen or neither does.
        """
        quantity = _positive_quantity(quantity)
        sweet = self.get(sweet_id)

        try:
            result = self.session.execute(
                update(Sweet)
                .where(Sweet.id == sweet_id, Sweet.quantity >= quantity)
                .values(quantity=Sweet.quantity - quantity)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                self.storage.rollback()
                self.session.refresh(sweet)
                raise InsufficientStockError(f"Insufficient quantity. Only {sweet.quantity} available")

            self.orders.create_order(
                user_id,
                [OrderLine(sweet_id=sweet.id, name=sweet.name, quantity=quantity, price=Decimal(sweet.price))],
                commit=False,
            )
            self.storage.save()
        except SQLAlchemyError as exc:
            self.storage.rollback()
            logger.exception("purchase failed sweet=%s", sweet_id, exc_info=exc)
            raise PersistenceError("Failed to purchase sweet")

        self.session.refresh(sweet)
        logger.info("purchase sweet=%s user=%s qty=%d", sweet_id, user_id, quantity)
        return sweet

    def restock(self, sweet_id: str, quantity: int) -> Sweet:
        quantity = _positive_quantity(quantity)
        sweet = self.get(sweet_id)
        self.session.execute(
            update(Sweet)
            .where(Sweet.id == sweet_id)
            .values(quantity=Sweet.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        self.storage.save()
        self.session.refresh(sweet)
        logger.info("restock sweet=%s qty=%d", sweet_id, quantity)
        return sweet
