# bidtracker/services/directory.py
"""Company and contact lookups shared by bulk import and the companies API."""

import logging
from ..models import db, Company, Contact

logger = logging.getLogger(__name__)


def find_or_create_company(name):
    """
    Return the company with exactly this name, creating it if absent.

    The new row is flushed (so it has an id) but not committed; the caller owns
    the transaction.
    """
    company = Company.query.filter_by(name=name).order_by(Company.id).first()
    if company is None:
        company = Company(name=name)
        db.session.add(company)
        db.session.flush()
        logger.info(f"Created company '{name}' (id {company.id})")
    return company


def find_or_create_contact(name, company_id):
    """Return the contact ``name`` at ``company_id``, creating it if absent. Does not commit."""
    contact = (Contact.query
               .filter_by(name=name, company_id=company_id)
               .order_by(Contact.id)
               .first())
    if contact is None:
        contact = Contact(name=name, company_id=company_id)
        db.session.add(contact)
        db.session.flush()
        logger.info(f"Created contact '{name}' for company {company_id} (id {contact.id})")
    return contact
