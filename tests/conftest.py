"""Shared fixtures; also makes the repo root importable when pytest runs from elsewhere."""

import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from repairdesk.core.models import JobCard, JobCardInput, ProductType  # noqa: E402

T0 = datetime(2024, 5, 1, 4, 30, tzinfo=timezone.utc)


class StepClock:
    """Deterministic clock: each call is one minute after the previous one."""

    def __init__(self, start: datetime = T0):
        self.now = start - timedelta(minutes=1)

    def __call__(self) -> datetime:
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def ravi_input() -> JobCardInput:
    return JobCardInput(
        customer_name="Ravi Kumar",
        phone_number="919876500000",
        address="12 MG Road, Vijayawada",
        product_type=ProductType.LAPTOP,
        model="Dell 5420",
        problem_description="Screen flicker",
    )


@pytest.fixture
def ravi_job() -> JobCard:
    return JobCard(
        id="SST-0001",
        created_at=T0,
        customer_name="Ravi Kumar",
        phone_number="+91 98765-00000",
        address="12 MG Road, Vijayawada",
        product_type=ProductType.LAPTOP,
        model="Dell 5420",
        problem_description="Screen flicker",
    )


def make_input(name: str, phone: str = "9876543210", **kw) -> JobCardInput:
    fields = dict(
        customer_name=name,
        phone_number=phone,
        address="Main Bazaar",
        product_type=ProductType.PRINTER,
        model="HP 1020",
        problem_description="Paper jam",
    )
    fields.update(kw)
    return JobCardInput(**fields)
