from marshmallow import Schema, fields, pre_load, validate, validates, ValidationError

from models.schemas.common import strip_text, to_decimal_2
from models.sweet import CATEGORIES

_name = validate.Length(min=2, max=100, error="Name must be 2-100 characters")
_category = validate.OneOf(CATEGORIES, error="Invalid category")
_description = validate.Length(max=500, error="Description max 500 characters")


def _quantity_field(**kwargs):
    return fields.Integer(
        strict=True,
        validate=validate.Range(min=0, error="Quantity must be a non-negative integer"),
        **kwargs,
    )


class SweetBaseSchema(Schema):
    @pre_load
    def _strip(self, data, **kwargs):
        if isinstance(data, dict):
            data = {k: strip_text(v) if k in ("name", "category", "description") else v for k, v in data.items()}
        return data

    @validates("price")
    def _validate_price(self, value, **kwargs):
        if value is not None:
            to_decimal_2(value)


class SweetCreateSchema(SweetBaseSchema):
    name = fields.String(required=True, validate=_name)
    category = fields.String(required=True, validate=_category)
    price = fields.Decimal(required=True, places=2)
    quantity = _quantity_field(required=True)
    description = fields.String(load_default=None, allow_none=True, validate=_description)


class SweetUpdateSchema(SweetBaseSchema):
    # All optional, but validate if present
    name = fields.String(validate=_name)
    category = fields.String(validate=_category)
    price = fields.Decimal(places=2)
    quantity = _quantity_field()
    description = fields.String(allow_none=True, validate=_description)

    @validates("price")
    def _validate_price(self, value, **kwargs):
        if value is None:
            raise ValidationError("Price must be a valid positive number")
        to_decimal_2(value)


class QuantitySchema(Schema):
    """Body of purchase / restock."""

    quantity = fields.Integer(
        required=True,
        strict=True,
        validate=validate.Range(min=1, error="Quantity must be a positive integer"),
        error_messages={
            "required": "Quantity must be a positive integer",
            "invalid": "Quantity must be a positive integer",
        },
    )


class SweetOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    category = fields.String()
    price = fields.Float()
    quantity = fields.Integer()
    description = fields.String(allow_none=True)
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
