"""Test configuration and fixtures."""

import os
import sys
from datetime import datetime, timedelta

import pytest

# Add paths
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Point the app at an in-memory database BEFORE fleetcaf.config is imported.
os.environ["DATABASE_URL"] = "sqlite://"

from fleetcaf import models  # noqa: E402
from fleetcaf.database import Base, SessionLocal, engine  # noqa: E402
from fleetcaf.workflow import Actor  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database tables before tests."""
    Base.metadata.create_all(bind=engine)

    yield

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db():
    """Database session fixture with automatic cleanup."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        # Clean up tables in reverse dependency order
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
        db.close()


@pytest.fixture
def organization(db):
    org = models.Organization(name="Acme Freight")
    db.add(org)
    db.commit()
    return org


@pytest.fixture
def other_organization(db):
    org = models.Organization(name="Other Haulers")
    db.add(org)
    db.commit()
    return org


@pytest.fixture
def make_staff(db):
    """Factory: make_staff(org, can_sign=..., can_approve=..., master=...)."""
    counter = {"n": 0}

    def _make(organization=None, can_sign=False, can_approve=False, master=False, active=True):
        counter["n"] += 1
        staff = models.Staff(
            organization_id=organization.id if organization else None,
            first_name="Staff",
            last_name=f"Member{counter['n']}",
            position="Safety Supervisor",
            user_type="master" if master else "organization",
            can_sign_cafs=can_sign,
            can_approve_cafs=can_approve,
            is_active=active,
        )
        db.add(staff)
        db.commit()
        return staff

    return _make


@pytest.fixture
def assignee(organization, make_staff):
    """Organization staff who works and signs CAFs."""
    return make_staff(organization, can_sign=True)


@pytest.fixture
def approver(organization, make_staff):
    """Organization safety officer who creates and approves CAFs."""
    return make_staff(organization, can_sign=True, can_approve=True)


@pytest.fixture
def master(make_staff):
    return make_staff(None, master=True)


@pytest.fixture
def actor_for():
    return Actor.from_staff


@pytest.fixture
def incident(db, organization):
    incident = models.Incident(
        organization_id=organization.id,
        incident_type="ROADSIDE_INSPECTION",
        reference_number="RINS-1001",
        equipment_id="TRUCK-42",
        occurred_at=datetime(2026, 3, 1, 14, 30),
    )
    db.add(incident)
    db.commit()
    return incident


@pytest.fixture
def make_caf(db, organization, incident):
    """Factory: persist a CAF directly in any status, bypassing the workflow."""
    counter = {"n": 0}

    def _make(assignee, status="ASSIGNED", category="DRIVER_PERFORMANCE",
              violation_type="Driver_Performance", codes=("392.2A",), org=None):
        counter["n"] += 1
        caf = models.CorrectiveActionForm(
            caf_number=f"CAF-TEST-{counter['n']:04d}",
            incident_id=incident.id,
            violation_type=violation_type,
            violation_codes=list(codes),
            violation_summary=f"violations: {', '.join(codes)}",
            title="Test corrective action",
            category=category,
            priority="HIGH",
            status=status,
            organization_id=(org or organization).id,
            assigned_staff_id=assignee.id if assignee else None,
            due_date=datetime(2026, 3, 4) + timedelta(days=counter["n"]),
        )
        db.add(caf)
        db.commit()
        return caf

    return _make
