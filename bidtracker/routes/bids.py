# bidtracker/routes/bids.py
from flask import Blueprint, request, jsonify
from flask_login import login_required

from ..middleware.auth import current_context
from ..services import bid_service

bids_bp = Blueprint('bids', __name__)


@bids_bp.route('', methods=['GET'])
@login_required
def get_bids():
    """List bids; supports status, search, createdFrom and createdTo query params"""
    bids = bid_service.list_bids(
        current_context(),
        status=request.args.get('status') or None,
        search=request.args.get('search') or None,
        created_from=request.args.get('createdFrom') or None,
        created_to=request.args.get('createdTo') or None,
    )
    return jsonify(bids)


@bids_bp.route('/<bid_id>', methods=['GET'])
@login_required
def get_bid(bid_id):
    """Get a specific bid with company, contact, scopes, notes, tags and attachments"""
    return jsonify(bid_service.get_bid(current_context(), bid_id))


@bids_bp.route('', methods=['POST'])
@login_required
def create_bid():
    bid = bid_service.create_bid(current_context(), request.get_json(silent=True))
    return jsonify(bid), 201


@bids_bp.route('/<bid_id>', methods=['PUT'])
@login_required
def update_bid(bid_id):
    """Update a bid, replacing its whole scope list"""
    bid = bid_service.update_bid(current_context(), bid_id, request.get_json(silent=True))
    return jsonify(bid)


@bids_bp.route('/<bid_id>', methods=['DELETE'])
@login_required
def delete_bid(bid_id):
    bid_service.delete_bid(current_context(), bid_id)
    return '', 204
