"""Pytest fixtures for bidtracker tests."""

import pytest
from flask_login import FlaskLoginClient

from bidtracker.app import create_app
from bidtracker.models import db, User, Company, Contact
from bidtracker.services import bid_service
from bidtracker.services.permissions import RequestContext


@pytest.fixture
def app():
    """App on the testing config with a fresh in-memory database."""
    app = create_app('testing')
    app.test_client_class = FlaskLoginClient
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def users(app) -> dict[str, User]:
    """One active user per role, keyed by role."""
    created = {}
    for role in ('ADMIN', 'MANAGER', 'ESTIMATOR', 'VIEWER'):
        user = User(username=role.lower(), role=role)
        db.session.add(user)
        created[role] = user
    db.session.commit()
    return created


@pytest.fixture
def client_for(app, users):
    """Factory returning a test client logged in as the given role."""
    def _client(role: str):
        return app.test_client(user=users[role])
    return _client


@pytest.fixture
def admin_ctx() -> RequestContext:
    return RequestContext(user_id=1, role='ADMIN')


@pytest.fixture
def viewer_ctx() -> RequestContext:
    return RequestContext(user_id=4, role='VIEWER')


@pytest.fixture
def company(app) -> Company:
    company = Company(name='Acme Roofing')
    db.session.add(company)
    db.session.commit()
    return company


@pytest.fixture
def contact(company) -> Contact:
    contact = Contact(name='Jane Doe', company_id=company.id)
    db.session.add(contact)
    db.session.commit()
    return contact


@pytest.fixture
def make_bid(company, admin_ctx):
    """Factory creating a bid through the service with sensible defaults."""
    def _make(**overrides) -> dict:
        payload = {
            'projectName': 'Warehouse Reroof',
            'clientCompanyId': company.id,
            'proposalDate': '2024-03-01',
            'dueDate': '2024-03-15',
            'bidStatus': 'Active',
            'scopes': [{'name': 'Roof', 'cost': '1,200', 'status': 'won'}],
        }
        payload.update(overrides)
        return bid_service.create_bid(admin_ctx, payload)
    return _make
