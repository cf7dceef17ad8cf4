import pytest

from careplan.auth import AllowListGate
from careplan.events import InMemoryEventSink
from careplan.services import CarePlanService

PATIENT = 'patient:john-doe'
PROVIDER = 'provider:dr-smith'
NURSE = 'provider:nurse-kim'
STRANGER = 'patient:someone-else'

NOTES_HASH = bytes(range(32))


class FakeClock:
    """Settable clock so timestamps in assertions are exact."""

    def __init__(self, now=1_000_000):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def events():
    return InMemoryEventSink()


@pytest.fixture
def service(db, events, clock):
    return CarePlanService(gate=AllowListGate({PATIENT, PROVIDER, NURSE}), events=events, clock=clock)


@pytest.fixture
def plan_id(service, events):
    care_plan_id = service.create_care_plan(
        patient_id=PATIENT,
        provider_id=PROVIDER,
        plan_type='chronic_disease',
        conditions=['Hypertension'],
        goals=['Lower blood pressure'],
        start_date=1000,
        review_frequency_days=7,
    )
    events.clear()
    return care_plan_id


@pytest.fixture
def goal_id(service, plan_id, events):
    goal = service.add_care_goal(plan_id, PROVIDER, 'BP below 130/80', '130/80', 5000, 'high')
    events.clear()
    return goal
