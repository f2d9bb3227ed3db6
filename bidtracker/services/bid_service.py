# bidtracker/services/bid_service.py
"""
Bid record service: list, read, create, update and delete bids.

Every call takes the caller's RequestContext first and checks permissions
before touching the database. Reads attach the derived ``amount`` and
``scopeStatus`` and pass through role redaction; writes never do.
"""

import logging
from datetime import datetime, time, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from ..errors import NotFound, TransactionError, ValidationError
from ..models import db, Bid, Scope, Note, Attachment, BidTag, Company, Contact
from ..models.base import utcnow
from .aggregate import aggregate_scope_status, total_amount
from .normalize import clean_bid_status, parse_loose_date, sanitize_scopes
from .permissions import authorize, redact_bid, redact_bids

logger = logging.getLogger(__name__)

MAX_ID = 2**63 - 1

DATE_FIELDS = (
    ('proposalDate', 'proposal_date'),
    ('dueDate', 'due_date'),
    ('followUpOn', 'follow_up_on'),
)


def parse_id(value, field_name='id'):
    """Coerce a path or payload id to int, raising ValidationError when malformed."""
    if isinstance(value, bool):
        raise ValidationError(f'Invalid {field_name}')
    if isinstance(value, int):
        number = value
    else:
        try:
            number = int(str(value).strip())
        except (TypeError, ValueError):
            raise ValidationError(f'Invalid {field_name}')
    # ids are stored as signed 64-bit integers
    if not -MAX_ID - 1 <= number <= MAX_ID:
        raise ValidationError(f'Invalid {field_name}')
    return number


def _optional_text(value):
    text = '' if value is None else str(value).strip()
    return text or None


def _optional_date(data, key):
    raw = data.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    parsed = parse_loose_date(raw)
    if parsed is None:
        raise ValidationError(f'Invalid {key} "{raw}". Use YYYY-MM-DD or DD/MM/YYYY.')
    return parsed


def _bid_fields(data):
    """Validate a create/update payload and return model column values."""
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')

    project_name = _optional_text(data.get('projectName'))
    if not project_name:
        raise ValidationError('projectName is required')

    if data.get('clientCompanyId') in (None, ''):
        raise ValidationError('clientCompanyId is required')
    company_id = parse_id(data['clientCompanyId'], 'clientCompanyId')
    if db.session.get(Company, company_id) is None:
        raise ValidationError(f'Unknown clientCompanyId {company_id}')

    contact_id = None
    if data.get('contactId') not in (None, '', 0):
        contact_id = parse_id(data['contactId'], 'contactId')
        contact = db.session.get(Contact, contact_id)
        if contact is None:
            raise ValidationError(f'Unknown contactId {contact_id}')
        if contact.company_id != company_id:
            raise ValidationError(f'Contact {contact_id} does not belong to company {company_id}')

    fields = {
        'project_name': project_name,
        'client_company_id': company_id,
        'contact_id': contact_id,
        'job_location': _optional_text(data.get('jobLocation')),
        'lead_source': _optional_text(data.get('leadSource')),
        'bid_status': clean_bid_status(data.get('bidStatus')),
    }
    for key, column in DATE_FIELDS:
        fields[column] = _optional_date(data, key)
    return fields


def _day_bound(value, name):
    if value is None or value == '':
        return None
    parsed = parse_loose_date(value)
    if parsed is None:
        raise ValidationError(f'Invalid {name} "{value}"')
    return parsed


def serialize_bid(bid, detail=False):
    """
    Full (unredacted) record for one bid with derived fields.

    ``detail`` adds the related company, contact, notes, tags and attachments.
    """
    scopes = list(bid.scopes)
    record = bid.to_dict()
    record.update({
        'clientName': bid.client_company.name if bid.client_company else None,
        'contactName': bid.contact.name if bid.contact else None,
        'amount': total_amount(scopes),
        'scopeStatus': aggregate_scope_status(scopes),
        'scopes': [scope.to_dict() for scope in scopes],
    })
    if detail:
        record.update({
            'clientCompany': bid.client_company.to_dict() if bid.client_company else None,
            'contact': bid.contact.to_dict() if bid.contact else None,
            'notes': [note.to_dict() for note in bid.notes],
            'tags': [link.to_dict() for link in bid.tag_links],
            'attachments': [attachment.to_dict() for attachment in bid.attachments],
        })
    return record


def _matches_search(bid, search):
    """Case-sensitive substring match on project, company or contact name."""
    candidates = (
        bid.project_name,
        bid.client_company.name if bid.client_company else None,
        bid.contact.name if bid.contact else None,
    )
    return any(search in candidate for candidate in candidates if candidate)


def list_bids(ctx, status=None, search=None, created_from=None, created_to=None):
    """
    List bids, most recently updated first.

    Args:
        ctx: RequestContext of the caller
        status: Exact bidStatus to match
        search: Substring of project, company or contact name (case-sensitive)
        created_from: First creation day to include (date or date string)
        created_to: Last creation day to include (date or date string)

    Returns:
        list[dict]: Records with ``amount`` and ``scopeStatus``, redacted for the caller
    """
    authorize(ctx, 'read')

    start = _day_bound(created_from, 'createdFrom')
    end = _day_bound(created_to, 'createdTo')
    search = (search or '').strip()

    query = Bid.query.options(
        selectinload(Bid.scopes),
        joinedload(Bid.client_company),
        joinedload(Bid.contact),
    )
    if status:
        query = query.filter(Bid.bid_status == status)
    if start:
        query = query.filter(Bid.created_at >= datetime.combine(start, time.min))
    if end:
        query = query.filter(Bid.created_at < datetime.combine(end + timedelta(days=1), time.min))

    bids = query.order_by(Bid.updated_at.desc(), Bid.id.desc()).all()
    if search:
        bids = [bid for bid in bids if _matches_search(bid, search)]

    return redact_bids(ctx, [serialize_bid(bid) for bid in bids])


def _load_bid(bid_id):
    bid = db.session.get(Bid, bid_id)
    if bid is None:
        raise NotFound()
    return bid


def get_bid(ctx, bid_id):
    """Fetch one bid with all related records. Raises NotFound if it does not exist."""
    authorize(ctx, 'read')
    bid = _load_bid(parse_id(bid_id))
    return redact_bid(ctx, serialize_bid(bid, detail=True))


def create_bid(ctx, data):
    """Create a bid and its sanitized scopes in one transaction."""
    authorize(ctx, 'create')
    fields = _bid_fields(data)
    scopes = sanitize_scopes(data.get('scopes'))

    try:
        bid = Bid(**fields)
        bid.scopes = [Scope(**scope) for scope in scopes]
        db.session.add(bid)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating bid '{fields['project_name']}': {str(e)}")
        raise TransactionError('Failed to create bid') from e

    logger.info(f"Created bid {bid.id} with {len(scopes)} scope(s) (user {ctx.user_id})")
    return serialize_bid(bid)


def update_bid(ctx, bid_id, data):
    """
    Replace a bid's fields and its entire scope set.

    Old scopes are removed and the sanitized incoming ones created in the same
    transaction as the field update; on failure the previous state is kept.
    """
    authorize(ctx, 'update')
    bid_id = parse_id(bid_id)
    bid = _load_bid(bid_id)
    fields = _bid_fields(data)
    scopes = sanitize_scopes(data.get('scopes'))

    try:
        for column, value in fields.items():
            setattr(bid, column, value)
        bid.updated_at = utcnow()
        # delete-orphan removes every scope not in the new list
        bid.scopes = [Scope(**scope) for scope in scopes]
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating bid {bid_id}: {str(e)}")
        raise TransactionError('Failed to update bid') from e

    logger.info(f"Updated bid {bid_id}; scopes replaced with {len(scopes)} (user {ctx.user_id})")
    return serialize_bid(bid)


def delete_bid(ctx, bid_id):
    """
    Delete a bid with its scopes, notes, attachments and tag links.

    Raises NotFound when no bid row was deleted.
    """
    authorize(ctx, 'delete')
    bid_id = parse_id(bid_id)

    try:
        for child in (Scope, Note, Attachment, BidTag):
            child.query.filter_by(bid_id=bid_id).delete(synchronize_session='fetch')
        deleted = Bid.query.filter_by(id=bid_id).delete(synchronize_session='fetch')
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting bid {bid_id}: {str(e)}")
        raise TransactionError('Failed to delete bid') from e

    if deleted == 0:
        raise NotFound()

    logger.info(f"Deleted bid {bid_id} (user {ctx.user_id})")
    return deleted
