"""
Bid tracking backend: companies, contacts, bids and their scopes behind
role-gated CRUD, with bulk CSV import and derived bid summaries.
"""

__version__ = '1.0.0'
