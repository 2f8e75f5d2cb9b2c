"""
API response helpers.

Errors share one JSON shape across the API:

    Error:    {"success": false, "error": "Reservation not found"}
    Action:   {"success": true, "reservation": {...}}
    Page:     {"data": [...], "total": 42, "page": 1, "limit": 10, "totalPages": 5}

Usage:
    from utils.api_response import api_success, api_error

    return api_success(reservation=serialize_reservation(reservation))
    return api_error('Missing field: clientId', status=400)
"""

import math
from typing import Any

from flask import jsonify


def api_success(status: int = 200, **fields: Any) -> tuple:
    """
    Build an action-result JSON response.

    Args:
        status: HTTP status code (default 200).
        **fields: Top-level fields to include next to 'success'.

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': True}
    response.update(fields)
    return jsonify(response), status


def api_error(error: str, status: int = 400, **extra_fields: Any) -> tuple:
    """
    Build an error JSON response.

    Args:
        error: Error message.
        status: HTTP status code (default 400).
        **extra_fields: Additional top-level fields (e.g., field errors, conflicts).

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': False, 'error': error}

    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status


def api_page(items: list, total: int, page: int, limit: int) -> tuple:
    """Build a paginated list response."""
    return jsonify({
        'data': items,
        'total': total,
        'page': page,
        'limit': limit,
        'totalPages': math.ceil(total / limit) if limit else 0,
    }), 200
