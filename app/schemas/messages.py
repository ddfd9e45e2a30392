"""
Rule messages for request validation errors.

pydantic reports a violated ``Field`` constraint by error type (``missing``,
``string_too_long``, ``greater_than`` ...). The API answers with sentences
such as "First name is required.", so each error is rewritten here from the
field's label and the error type.
"""

from typing import Any, Dict, List

FIELD_LABELS = {
    "firstName": "First name",
    "lastName": "Last name",
    "email": "Email",
    "password": "Password",
    "confirmPassword": "Password confirmation",
    "twoFactorCode": "2FA code",
    "token": "Token",
    "refreshToken": "Refresh token",
    "name": "Product name",
    "description": "Description",
    "price": "Price",
    "stockQuantity": "Stock quantity",
}

RULE_MESSAGES = {
    ("email", "value_error"): "A valid email address is required.",
    ("twoFactorCode", "string_too_short"): "2FA code must be 6 digits.",
    ("twoFactorCode", "string_too_long"): "2FA code must be 6 digits.",
    ("twoFactorCode", "string_pattern_mismatch"): "2FA code must contain only numbers.",
    ("price", "greater_than"): "Price must be greater than zero.",
    ("price", "decimal_max_places"): "Price cannot have more than 2 decimal places.",
    ("price", "decimal_max_digits"): "Price is too large.",
    ("price", "decimal_whole_digits"): "Price is too large.",
    ("stockQuantity", "greater_than_equal"): "Stock quantity cannot be negative.",
    ("stockQuantity", "less_than_equal"): "Stock quantity is too large.",
}

# prefixos que não fazem parte do nome do campo
_LOCATION_ROOTS = ("body",)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def describe_error(error: Dict[str, Any]) -> List[str]:
    """
    Messages for one pydantic error dict (as returned by ``errors()``).

    Errors raised by custom validators may carry several rules, one per line.
    Anything without a known label falls back to ``"<location>: <msg>"``.
    """
    location = [str(part) for part in error.get("loc", ()) if part not in _LOCATION_ROOTS]
    field = location[-1] if location else None
    kind = error.get("type", "")
    label = FIELD_LABELS.get(field)

    if label and (kind == "missing" or _is_blank(error.get("input"))):
        return [f"{label} is required."]

    if (field, kind) in RULE_MESSAGES:
        return [RULE_MESSAGES[(field, kind)]]

    if label and kind == "string_too_long":
        return [f"{label} cannot exceed {error['ctx']['max_length']} characters."]

    message = str(error.get("msg", "Invalid value.")).removeprefix("Value error, ")
    if kind == "value_error":
        return message.splitlines()

    where = ".".join(location)
    return [f"{where}: {message}" if where else message]
