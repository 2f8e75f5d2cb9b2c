"""
JSON API blueprint.
Split into smaller modules by entity for maintainability.
"""

from flask import Blueprint

# Create the API blueprint
api_bp = Blueprint('api', __name__)

# Import and register routes from submodules
from blueprints.api import routes
from blueprints.api import reservations
from blueprints.api import invoices
from blueprints.api import clients
from blueprints.api import attractions
from blueprints.api import maintenance
from blueprints.api import documents
from blueprints.api import audit_logs

# Register all route functions on the blueprint
routes.register_routes(api_bp)
reservations.register_routes(api_bp)
invoices.register_routes(api_bp)
clients.register_routes(api_bp)
attractions.register_routes(api_bp)
maintenance.register_routes(api_bp)
documents.register_routes(api_bp)
audit_logs.register_routes(api_bp)
