# bidtracker/services/permissions.py
"""
Role-based permission matrix and response redaction.

The caller's identity is always passed in explicitly as a RequestContext;
nothing here reads Flask or Flask-Login globals.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import Forbidden

logger = logging.getLogger(__name__)

ROLES = ('ADMIN', 'MANAGER', 'ESTIMATOR', 'VIEWER')
ACTIONS = ('read', 'create', 'update', 'delete')

ROLE_PERMISSIONS = {
    'ADMIN': frozenset({'read', 'create', 'update', 'delete'}),
    'MANAGER': frozenset({'read', 'create', 'update'}),
    'ESTIMATOR': frozenset({'read', 'create', 'update', 'delete'}),
    'VIEWER': frozenset({'read'}),
}

# Roles that see bids without amounts or scopes
REDACTED_ROLES = frozenset({'VIEWER'})


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller for one service call."""

    user_id: Optional[int] = None
    role: Optional[str] = None

    @property
    def is_redacted(self) -> bool:
        return self.role in REDACTED_ROLES


ANONYMOUS = RequestContext()


def can(role: Optional[str], action: str) -> bool:
    """True if ``role`` may perform ``action``. A missing or unknown role may do nothing."""
    if not role:
        return False
    return action in ROLE_PERMISSIONS.get(role, frozenset())


def authorize(ctx: Optional[RequestContext], action: str) -> None:
    """Raise Forbidden unless the caller may perform ``action``."""
    role = ctx.role if ctx else None
    if not can(role, action):
        user_id = ctx.user_id if ctx else None
        logger.warning(f"Denied '{action}' for user {user_id} (role: {role or 'N/A'})")
        raise Forbidden()


def redact_bid(ctx: Optional[RequestContext], record: dict) -> dict:
    """
    Build the outbound view of one bid record for the caller.

    Redacted roles get a copy with ``amount`` set to None and no ``scopes``
    key at all. The input dict is never modified.
    """
    view = dict(record)
    if ctx is None or ctx.is_redacted:
        view['amount'] = None
        view.pop('scopes', None)
    return view


def redact_bids(ctx: Optional[RequestContext], records) -> list:
    return [redact_bid(ctx, record) for record in records]
