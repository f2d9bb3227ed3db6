# bidtracker/services/reconcile.py
"""
Bulk bid import.

Flat rows (one scope per row) are grouped into bids by project name and client
company, then each group is committed in its own transaction. A failing group
is reported in the result and never stops the remaining groups.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import ReconciliationError
from ..models import db, Bid, Scope
from .directory import find_or_create_company, find_or_create_contact
from .normalize import (
    DEFAULT_BID_STATUS,
    clean_bid_status,
    clean_scope_status,
    parse_loose_date,
    sanitize_scopes,
    to_number_or_zero,
)
from .permissions import authorize

logger = logging.getLogger(__name__)

KEY_SEPARATOR = '||'


@dataclass
class BidGroup:
    """Bid-level fields seeded by the first row of a group, plus one scope draft per row."""

    key: str
    project_name: str
    client_company: str
    contact_name: Optional[str]
    proposal_date: str
    due_date: str
    job_location: Optional[str]
    lead_source: Optional[str]
    bid_status: str = DEFAULT_BID_STATUS
    scopes: list = field(default_factory=list)


def _cell(row, column):
    value = row.get(column)
    return '' if value is None else str(value).strip()


def group_key(project_name, client_company):
    return f"{project_name}{KEY_SEPARATOR}{client_company}"


def group_rows(rows):
    """
    Group import rows into bids keyed by the ``(projectName, clientCompany)`` pair.

    Rows missing either key field are skipped. A group's status starts as the
    first row's status; while it is still Active, the first row carrying any
    other status replaces it, and it never changes after that.

    Returns:
        dict: (project_name, client_company) -> BidGroup, in first-seen order
    """
    groups = {}
    for row in rows:
        project_name = _cell(row, 'projectName')
        client_company = _cell(row, 'clientCompany')
        if not project_name or not client_company:
            continue

        pair = (project_name, client_company)
        incoming_status = clean_bid_status(row.get('bidStatus'))
        group = groups.get(pair)

        if group is None:
            group = BidGroup(
                key=group_key(project_name, client_company),
                project_name=project_name,
                client_company=client_company,
                contact_name=_cell(row, 'contactName') or None,
                proposal_date=_cell(row, 'proposalDate'),
                due_date=_cell(row, 'dueDate'),
                job_location=_cell(row, 'jobLocation') or None,
                lead_source=_cell(row, 'leadSource') or None,
                bid_status=incoming_status,
            )
            groups[pair] = group
        elif group.bid_status == DEFAULT_BID_STATUS and incoming_status != DEFAULT_BID_STATUS:
            group.bid_status = incoming_status

        group.scopes.append({
            'name': _cell(row, 'scopeName'),
            'cost': to_number_or_zero(row.get('scopeCost')),
            'status': clean_scope_status(row.get('scopeStatus')),
        })

    return groups


def commit_group(group):
    """
    Persist one group as a bid with its scopes, creating the company and
    contact on the way if needed. Everything for the group commits together.

    Raises:
        ReconciliationError: dates did not parse or the write failed
    """
    proposal_date = parse_loose_date(group.proposal_date)
    due_date = parse_loose_date(group.due_date)
    if proposal_date is None or due_date is None:
        raise ReconciliationError(
            f'Invalid date(s). proposalDate="{group.proposal_date}" dueDate="{group.due_date}". '
            f'Use YYYY-MM-DD or DD/MM/YYYY.'
        )

    try:
        company = find_or_create_company(group.client_company)
        contact = None
        if group.contact_name:
            contact = find_or_create_contact(group.contact_name, company.id)

        bid = Bid(
            project_name=group.project_name,
            client_company_id=company.id,
            contact_id=contact.id if contact else None,
            proposal_date=proposal_date,
            due_date=due_date,
            job_location=group.job_location,
            lead_source=group.lead_source,
            bid_status=group.bid_status or DEFAULT_BID_STATUS,
        )
        bid.scopes = [Scope(**scope) for scope in sanitize_scopes(group.scopes)]
        db.session.add(bid)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ReconciliationError(f'Failed to save bid: {e}') from e

    return bid


def import_bid_rows(ctx, rows, max_rows=None):
    """
    Import flat bid rows.

    Args:
        ctx: RequestContext of the caller (needs 'create')
        rows: Iterable of dicts keyed by the import column names
        max_rows: Optional cap on the number of rows read

    Returns:
        dict: ``{'imported': int, 'errors': [{'key': str, 'message': str}]}``
    """
    authorize(ctx, 'create')

    rows = list(rows)
    if max_rows is not None and len(rows) > max_rows:
        logger.warning(f"Import has {len(rows)} rows; only the first {max_rows} will be read")
        rows = rows[:max_rows]

    groups = group_rows(rows)
    imported = []
    errors = []

    for group in groups.values():
        key = group.key
        try:
            bid = commit_group(group)
            imported.append(bid.id)
        except ReconciliationError as e:
            logger.warning(f"Import group '{key}' failed: {e.message}")
            errors.append({'key': key, 'message': e.message})
        except Exception as e:
            db.session.rollback()
            logger.exception(f"Unexpected error importing group '{key}'")
            errors.append({'key': key, 'message': str(e)})

    logger.info(f"Bid import finished: {len(imported)} imported, {len(errors)} failed "
                f"({len(rows)} rows, {len(groups)} groups)")
    return {'imported': len(imported), 'errors': errors}
