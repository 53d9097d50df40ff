from decimal import Decimal, InvalidOperation

from marshmallow import ValidationError


def norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


def strip_text(v):
    return v.strip() if isinstance(v, str) else v


def to_decimal_2(value) -> Decimal:
    if value is None:
        return None
    try:
        d = Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValidationError("Price must be a valid positive number")
    if not d.is_finite() or d < 0:
        raise ValidationError("Price must be a valid positive number")
    return d.quantize(Decimal("0.01"))


def flatten_messages(messages, prefix: str = "") -> list:
    """Turn marshmallow's nested {field: [msg]} into flat strings."""
    out = []
    if isinstance(messages, dict):
        for key, value in messages.items():
            out.extend(flatten_messages(value, prefix=str(key)))
    elif isinstance(messages, (list, tuple)):
        for value in messages:
            out.extend(flatten_messages(value, prefix=prefix))
    else:
        out.append(f"{prefix}: {messages}" if prefix else str(messages))
    return out
