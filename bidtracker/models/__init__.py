# bidtracker/models/__init__.py

from .base import db

# Import order matters: companies and users first, then bids and their children.

# 1. Foundational Models
from .user import User
from .company import Company, Contact

# 2. Bids and owned records
from .bid import Bid, Scope
from .note import Note, Attachment, Tag, BidTag

__all__ = [
    'db',
    'User',
    'Company',
    'Contact',
    'Bid',
    'Scope',
    'Note',
    'Attachment',
    'Tag',
    'BidTag',
]
