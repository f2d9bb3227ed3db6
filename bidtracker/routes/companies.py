# bidtracker/routes/companies.py
from flask import Blueprint, request, jsonify
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError
import logging

from ..middleware.auth import permission_required
from ..models import db, Company, Contact

companies_bp = Blueprint('companies', __name__)
logger = logging.getLogger(__name__)


@companies_bp.route('', methods=['GET'])
@login_required
@permission_required('read')
def get_companies():
    """Get all companies ordered by name"""
    companies = Company.query.order_by(Company.name, Company.id).all()
    return jsonify([company.to_dict() for company in companies])


@companies_bp.route('', methods=['POST'])
@login_required
@permission_required('create')
def create_company():
    """Return the company with this exact name, creating it if needed"""
    data = request.get_json(silent=True) or {}
    name = str(data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Company name is required'}), 400

    existing = Company.query.filter_by(name=name).order_by(Company.id).first()
    if existing is not None:
        return jsonify(existing.to_dict()), 200

    try:
        company = Company(name=name)
        db.session.add(company)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating company: {str(e)}")
        return jsonify({'error': 'Failed to create company'}), 500

    return jsonify(company.to_dict()), 201


@companies_bp.route('/<int(max=9223372036854775807):company_id>/contacts', methods=['GET'])
@login_required
@permission_required('read')
def get_company_contacts(company_id):
    """Get the contacts of one company"""
    if db.session.get(Company, company_id) is None:
        return jsonify({'error': 'Not found'}), 404
    contacts = Contact.query.filter_by(company_id=company_id).order_by(Contact.name, Contact.id).all()
    return jsonify([contact.to_dict() for contact in contacts])
