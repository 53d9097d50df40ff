from __future__ import annotations

from flask import Blueprint, g, request

from api.deps import get_sweet_service
from api.responses import envelope
from models.schemas.sweet import QuantitySchema, SweetCreateSchema, SweetOutSchema, SweetUpdateSchema
from models.user import Role
from utils.decorators import jwt_required, roles_required

bp = Blueprint("sweets", __name__)

# Schemas
sweet_create_schema = SweetCreateSchema()
sweet_update_schema = SweetUpdateSchema()
quantity_schema = QuantitySchema()
sweet_out_schema = SweetOutSchema()
sweets_out_schema = SweetOutSchema(many=True)

ADMIN_ONLY = [Role.ADMIN]


@bp.post("")
@jwt_required()
@roles_required(ADMIN_ONLY)
def create_sweet():
    """
    Create a new sweet - admin
    ---
    tags:
      - Sweets
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            name: { type: string, minLength: 2, maxLength: 100 }
            category:
              type: string
              enum: [Chocolate, Candy, Gummy, Hard Candy, Lollipop, Toffee, Other]
            price: { type: number, minimum: 0 }
            quantity: { type: integer, minimum: 0 }
            description: { type: string, maxLength: 500 }
    responses:
      201:
        description: Created
      400:
        description: Validation error
      403:
        description: Not an admin
    """
    data = sweet_create_schema.load(request.get_json(silent=True) or {})
    sweet = get_sweet_service().create(data)
    return envelope("Sweet created successfully", sweet_out_schema.dump(sweet), 201)


@bp.get("")
@jwt_required()
def list_sweets():
    """
    List all sweets, newest first
    ---
    tags:
      - Sweets
    security:
      - Bearer: []
    responses:
      200:
        description: List of sweets
    """
    sweets = get_sweet_service().list_all()
    return envelope("Sweets retrieved successfully", sweets_out_schema.dump(sweets))


@bp.get("/<sweet_id>")
@jwt_required()
def get_sweet(sweet_id: str):
    """
    Get a single sweet by id
    ---
    tags:
      - Sweets
    security:
      - Bearer: []
    parameters:
      - in: path
        name: sweet_id
        type: string
        required: true
    responses:
      200:
        description: Sweet found
      404:
        description: Not found
    """
    sweet = get_sweet_service().get(sweet_id)
    return envelope("Sweet retrieved successfully", sweet_out_schema.dump(sweet))


@bp.put("/<sweet_id>")
@jwt_required()
@roles_required(ADMIN_ONLY)
def update_sweet(sweet_id: str):
    """
    Update a sweet (partial) - admin
    ---
    tags:
      - Sweets
    security:
      - Bearer: []
    parameters:
      - in: path
        name: sweet_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
    responses:
      200:
        description: Updated
      404:
        description: Not found
    """
    data = sweet_update_schema.load(request.get_json(silent=True) or {})
    sweet = get_sweet_service().update(sweet_id, data)
    return envelope("Sweet updated successfully", sweet_out_schema.dump(sweet))


@bp.delete("/<sweet_id>")
@jwt_required()
@roles_required(ADMIN_ONLY)
def delete_sweet(sweet_id: str):
    """
    Delete a sweet - admin
    ---
    tags:
      - Sweets
    security:
      - Bearer: []
    responses:
      200:
        description: Deleted
      404:
        description: Not found
    """
    get_sweet_service().delete(sweet_id)
    return envelope("Sweet deleted successfully")


@bp.post("/<sweet_id>/purchase")
@jwt_required()
def purchase_sweet(sweet_id: str):
    """
    Buy some units of a sweet; records an order for the caller
    ---
    tags:
      - Sweets
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            quantity: { type: integer, minimum: 1 }
    responses:
      200:
        description: Purchase successful (returns the updated sweet)
      400:
        description: Invalid quantity or insufficient stock
      404:
        description: Not found
    """
    data = quantity_schema.load(request.get_json(silent=True) or {})
    sweet = get_sweet_service().purchase(sweet_id, g.identity.user_id, data["quantity"])
    return envelope("Purchase successful", sweet_out_schema.dump(sweet))


@bp.post("/<sweet_id>/restock")
@jwt_required()
@roles_required(ADMIN_ONLY)
def restock_sweet(sweet_id: str):
    """
    Add units to a sweet's stock - admin
    ---
    tags:
      - Sweets
    security:
      - Bearer: []
    responses:
      200:
        description: Restock successful
      400:
        description: Invalid quantity
      404:
        description: Not found
    """
    data = quantity_schema.load(request.get_json(silent=True) or {})
    sweet = get_sweet_service().restock(sweet_id, data["quantity"])
    return envelope("Restock successful", sweet_out_schema.dump(sweet))
