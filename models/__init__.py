"""
Persistence layer: SQLAlchemy models and the DBStorage handle.

No storage instance lives here; create_app() builds one and hands it to
the services.
"""
from models.base_model import Base
from models.user import User, Role
from models.refresh_token import RefreshToken
from models.sweet import Sweet, CATEGORIES
from models.order import Order, OrderItem
from models.db_storage import DBStorage

__all__ = [
    "Base",
    "User",
    "Role",
    "RefreshToken",
    "Sweet",
    "CATEGORIES",
    "Order",
    "OrderItem",
    "DBStorage",
]
