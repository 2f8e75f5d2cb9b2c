"""API services package."""

from blueprints.api.services.email_service import (  # noqa: F401
    send_confirmation_email,
    render_confirmation_email,
)
