# bidtracker/services/aggregate.py
"""Derived bid summaries computed from a bid's scopes."""

from .normalize import clean_scope_status, to_number_or_zero, DEFAULT_SCOPE_STATUS

UNKNOWN_SCOPE_STATUS = 'Unknown'


def _scope_value(scope, field):
    if isinstance(scope, dict):
        return scope.get(field)
    return getattr(scope, field, None)


def total_amount(scopes):
    """Sum of every scope's cost; non-numeric costs count as 0."""
    return sum((to_number_or_zero(_scope_value(scope, 'cost')) for scope in scopes or ()), 0.0)


def aggregate_scope_status(scopes):
    """
    Summarize a set of scopes as 'Pending', 'Won', 'Lost' or 'Unknown'.

    Precedence: no scopes is Unknown, any Pending is Pending, all Won is Won,
    otherwise (Won and Lost mixed, or all Lost) Lost. Unrecognized statuses
    count as Pending. The result only depends on the multiset of statuses.
    """
    statuses = {
        clean_scope_status(_scope_value(scope, 'status')) or DEFAULT_SCOPE_STATUS
        for scope in scopes or ()
    }
    if not statuses:
        return UNKNOWN_SCOPE_STATUS
    if 'Pending' in statuses:
        return 'Pending'
    if statuses == {'Won'}:
        return 'Won'
    return 'Lost'
