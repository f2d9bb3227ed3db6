"""Tests for bulk bid import: grouping, status elevation and per-group commits."""

from datetime import date

import pytest
from sqlalchemy.exc import SQLAlchemyError

from bidtracker.errors import Forbidden
from bidtracker.models import Bid, Company, Contact, Scope
from bidtracker.services import reconcile
from bidtracker.services.reconcile import group_rows, import_bid_rows


def _row(**fields) -> dict[str, str]:
    row = {
        "projectName": "Warehouse Reroof",
        "clientCompany": "Acme Roofing",
        "contactName": "Jane Doe",
        "proposalDate": "2024-03-01",
        "dueDate": "15/03/2024",
        "jobLocation": "Springfield",
        "leadSource": "Referral",
        "bidStatus": "Active",
        "scopeName": "Roof",
        "scopeCost": "1,000",
        "scopeStatus": "Pending",
    }
    row.update(fields)
    return row


class TestGroupRows:
    """Tests for group_rows."""

    def test_same_key_combines_scopes(self) -> None:
        groups = group_rows([_row(scopeName="Roof"), _row(scopeName="Gutters", scopeCost="250")])
        assert list(groups) == [("Warehouse Reroof", "Acme Roofing")]
        group = groups[("Warehouse Reroof", "Acme Roofing")]
        assert group.key == "Warehouse Reroof||Acme Roofing"
        assert [s["name"] for s in group.scopes] == ["Roof", "Gutters"]
        assert [s["cost"] for s in group.scopes] == [1000.0, 250.0]

    def test_keys_are_trimmed(self) -> None:
        groups = group_rows([_row(projectName=" Barn "), _row(projectName="Barn", clientCompany=" Acme Roofing ")])
        assert list(groups) == [("Barn", "Acme Roofing")]

    def test_separator_in_names_does_not_merge_groups(self) -> None:
        """Pairs whose joined text collides still form separate groups."""
        groups = group_rows([
            _row(projectName="A||B", clientCompany="C", scopeName="Roof"),
            _row(projectName="A", clientCompany="B||C", scopeName="Siding"),
        ])
        assert list(groups) == [("A||B", "C"), ("A", "B||C")]
        assert [len(g.scopes) for g in groups.values()] == [1, 1]

    def test_rows_missing_key_fields_are_skipped(self) -> None:
        groups = group_rows([_row(projectName=""), _row(clientCompany="  "), {"scopeName": "x"}])
        assert groups == {}

    def test_first_row_seeds_bid_fields(self) -> None:
        groups = group_rows([_row(jobLocation="First"), _row(jobLocation="Second", dueDate="2025-01-01")])
        group = next(iter(groups.values()))
        assert group.job_location == "First"
        assert group.due_date == "15/03/2024"

    def test_status_elevates_once_and_sticks(self) -> None:
        groups = group_rows([
            _row(bidStatus="active"),
            _row(bidStatus="hot"),
            _row(bidStatus="active"),
            _row(bidStatus="cold"),
        ])
        assert next(iter(groups.values())).bid_status == "Hot"

    def test_first_non_active_status_is_kept(self) -> None:
        groups = group_rows([_row(bidStatus="archive"), _row(bidStatus="hot")])
        assert next(iter(groups.values())).bid_status == "Archived"

    def test_scope_status_left_unset_when_unknown(self) -> None:
        groups = group_rows([_row(scopeStatus="")])
        assert next(iter(groups.values())).scopes[0]["status"] is None


class TestImportBidRows:
    """Tests for import_bid_rows."""

    def test_two_rows_one_bid_two_scopes(self, app, admin_ctx) -> None:
        result = import_bid_rows(admin_ctx, [
            _row(scopeName="Roof", scopeStatus="won"),
            _row(scopeName="Gutters", scopeCost="250", scopeStatus=""),
        ])
        assert result == {"imported": 1, "errors": []}

        bid = Bid.query.one()
        assert bid.proposal_date == date(2024, 3, 1)
        assert bid.due_date == date(2024, 3, 15)
        assert bid.client_company.name == "Acme Roofing"
        assert bid.contact.name == "Jane Doe"
        assert sorted((s.name, s.cost, s.status) for s in bid.scopes) == [
            ("Gutters", 250.0, "Pending"),
            ("Roof", 1000.0, "Won"),
        ]

    def test_bad_date_group_reported_sibling_commits(self, app, admin_ctx) -> None:
        result = import_bid_rows(admin_ctx, [
            _row(projectName="Broken", dueDate="next week"),
            _row(projectName="Fine"),
        ])
        assert result["imported"] == 1
        assert len(result["errors"]) == 1
        error = result["errors"][0]
        assert error["key"] == "Broken||Acme Roofing"
        assert 'dueDate="next week"' in error["message"]
        assert "YYYY-MM-DD" in error["message"]
        assert [b.project_name for b in Bid.query.all()] == ["Fine"]

    def test_colliding_keys_import_as_separate_bids(self, app, admin_ctx) -> None:
        result = import_bid_rows(admin_ctx, [
            _row(projectName="A||B", clientCompany="C", scopeName="Roof"),
            _row(projectName="A", clientCompany="B||C", scopeName="Siding"),
        ])
        assert result == {"imported": 2, "errors": []}
        bids = sorted((b.project_name, b.client_company.name, len(b.scopes)) for b in Bid.query.all())
        assert bids == [("A", "B||C", 1), ("A||B", "C", 1)]
        assert sorted(c.name for c in Company.query.all()) == ["B||C", "C"]

    def test_reuses_existing_company_and_contact(self, app, admin_ctx, contact) -> None:
        import_bid_rows(admin_ctx, [_row(projectName="One"), _row(projectName="Two")])
        assert Company.query.count() == 1
        assert Contact.query.count() == 1
        assert {b.contact_id for b in Bid.query.all()} == {contact.id}

    def test_contact_scoped_to_company(self, app, admin_ctx) -> None:
        import_bid_rows(admin_ctx, [
            _row(projectName="One", clientCompany="North Co"),
            _row(projectName="Two", clientCompany="South Co"),
        ])
        assert Contact.query.filter_by(name="Jane Doe").count() == 2

    def test_no_contact_name(self, app, admin_ctx) -> None:
        import_bid_rows(admin_ctx, [_row(contactName="")])
        assert Bid.query.one().contact_id is None
        assert Contact.query.count() == 0

    def test_empty_scope_names_dropped(self, app, admin_ctx) -> None:
        import_bid_rows(admin_ctx, [_row(scopeName=""), _row(scopeName="Siding")])
        assert [s.name for s in Scope.query.all()] == ["Siding"]

    def test_elevated_status_persisted(self, app, admin_ctx) -> None:
        import_bid_rows(admin_ctx, [_row(bidStatus="active"), _row(bidStatus="hot"), _row(bidStatus="active")])
        assert Bid.query.one().bid_status == "Hot"

    def test_write_failure_rolls_back_group_only(self, app, admin_ctx, monkeypatch) -> None:
        """A failing group leaves no company, contact or bid behind."""
        real_create = reconcile.find_or_create_contact

        def flaky_contact(name, company_id):
            if name == "Broken Contact":
                raise SQLAlchemyError("insert failed")
            return real_create(name, company_id)

        monkeypatch.setattr(reconcile, "find_or_create_contact", flaky_contact)
        result = import_bid_rows(admin_ctx, [
            _row(projectName="Bad", clientCompany="Ghost Co", contactName="Broken Contact"),
            _row(projectName="Good"),
        ])

        assert result["imported"] == 1
        assert result["errors"][0]["key"] == "Bad||Ghost Co"
        assert "insert failed" in result["errors"][0]["message"]
        assert Company.query.filter_by(name="Ghost Co").count() == 0
        assert [b.project_name for b in Bid.query.all()] == ["Good"]

    def test_max_rows_caps_input(self, app, admin_ctx) -> None:
        result = import_bid_rows(admin_ctx, [_row(projectName="A"), _row(projectName="B")], max_rows=1)
        assert result["imported"] == 1
        assert Bid.query.one().project_name == "A"

    def test_empty_input(self, app, admin_ctx) -> None:
        assert import_bid_rows(admin_ctx, []) == {"imported": 0, "errors": []}

    def test_viewer_forbidden(self, app, viewer_ctx) -> None:
        with pytest.raises(Forbidden):
            import_bid_rows(viewer_ctx, [_row()])
        assert Bid.query.count() == 0
