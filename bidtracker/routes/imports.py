# bidtracker/routes/imports.py
from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required
import logging

from ..middleware.auth import current_context
from ..services.csv_import import parse_import_csv
from ..services.permissions import authorize
from ..services.reconcile import import_bid_rows

imports_bp = Blueprint('imports', __name__)
logger = logging.getLogger(__name__)


@imports_bp.route('/bids', methods=['POST'])
@login_required
def import_bids():
    """
    Bulk import bids from an uploaded CSV ('file' form field).

    Always answers 200 with {imported, errors} once the file is read; groups
    that fail are listed in errors.
    """
    ctx = current_context()
    authorize(ctx, 'create')

    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return jsonify({'error': 'No file'}), 400

    logger.info(f"User {ctx.user_id} importing bids from '{upload.filename}'")
    rows = parse_import_csv(upload.read())
    result = import_bid_rows(ctx, rows, max_rows=current_app.config.get('IMPORT_MAX_ROWS'))
    return jsonify(result), 200
