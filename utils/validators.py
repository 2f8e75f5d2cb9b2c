"""
Input validation helper functions.
Provides validation for request payloads shared by the API routes.
"""

import re

from utils.errors import ValidationError


def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if valid email format
    """
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def is_missing(value) -> bool:
    """A field is missing when absent, null or an empty string."""
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(data: dict, fields: list) -> None:
    """
    Check that every required field is present.

    Args:
        data: Request payload
        fields: Field names in the order they should be reported

    Raises:
        ValidationError: 'Missing field: <name>' for the first absent field
    """
    for field in fields:
        if is_missing(data.get(field)):
            raise ValidationError(f'Missing field: {field}')


def parse_id(value, field: str) -> int:
    """
    Parse an entity id from JSON (int or numeric string).

    Raises:
        ValidationError: If the value is not a positive integer
    """
    if isinstance(value, bool):
        raise ValidationError(f'Invalid {field}')
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {field}')
    if parsed < 1:
        raise ValidationError(f'Invalid {field}')
    return parsed


def parse_amount(value, field: str) -> float:
    """
    Parse a non-negative monetary amount.

    Raises:
        ValidationError: If the value is not a number or is negative
    """
    if isinstance(value, bool):
        raise ValidationError(f'Invalid {field}')
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {field}')
    if amount < 0:
        raise ValidationError(f'{field} cannot be negative')
    return round(amount, 2)


def parse_quantity(value) -> int:
    """Line item quantity; defaults to 1 and must be at least 1."""
    if value is None:
        return 1
    if isinstance(value, bool):
        raise ValidationError('Invalid quantity')
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ValidationError('Invalid quantity')
    if quantity < 1:
        raise ValidationError('Quantity must be at least 1')
    return quantity


def parse_page_args(args, default_limit: int, max_limit: int) -> tuple:
    """
    Read page/limit query parameters.

    Returns:
        Tuple of (page, limit) with page >= 1 and 1 <= limit <= max_limit
    """
    page = args.get('page', 1, type=int) or 1
    limit = args.get('limit', default_limit, type=int) or default_limit
    page = max(page, 1)
    limit = min(max(limit, 1), max_limit)
    return page, limit


def snake_case(name: str) -> str:
    """Convert a camelCase API key to snake_case."""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()
