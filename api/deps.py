"""Accessors for the per-app objects built in create_app()."""

from __future__ import annotations

from flask import current_app

from services.identity import IdentityService
from services.inventory import SweetService
from services.orders import OrderService


def get_identity_service() -> IdentityService:
    return current_app.extensions["identity_service"]


def get_sweet_service() -> SweetService:
    return current_app.extensions["sweet_service"]


def get_order_service() -> OrderService:
    return current_app.extensions["order_service"]
