"""
Flask blueprints for the Bid Tracker API.

Routes are thin: they build the caller's RequestContext and hand request data
to the service layer, which raises BidTrackerError subclasses that the app
factory renders as JSON.
"""

from .bids import bids_bp
from .companies import companies_bp
from .health import health_bp
from .imports import imports_bp

BLUEPRINTS = [
    (bids_bp, '/api/bids'),
    (imports_bp, '/api/import'),
    (companies_bp, '/api/companies'),
    (health_bp, '/api'),
]

__all__ = ['BLUEPRINTS', 'bids_bp', 'companies_bp', 'health_bp', 'imports_bp']
