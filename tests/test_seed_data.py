from io import StringIO

import pytest
from django.core.management import call_command

from careplan.entities import EntityType
from careplan.management.commands.seed_data import MOCK_PLANS
from careplan.storage import CarePlanStorage


@pytest.mark.django_db
def test_seed_data_creates_plans_through_service():
    out = StringIO()

    call_command('seed_data', stdout=out)

    storage = CarePlanStorage()
    assert storage.ids.current(EntityType.CARE_PLAN) == len(MOCK_PLANS)
    assert storage.ids.current(EntityType.REVIEW) == len(MOCK_PLANS)
    assert len(storage.load_care_team(1)) == 1
    assert f"Created {len(MOCK_PLANS)} mock care plans" in out.getvalue()


@pytest.mark.django_db
def test_seed_data_clear_restarts_ids():
    call_command('seed_data', stdout=StringIO())

    call_command('seed_data', '--clear', stdout=StringIO())

    storage = CarePlanStorage()
    assert storage.ids.current(EntityType.CARE_PLAN) == len(MOCK_PLANS)
    assert storage.patient_plans.list(MOCK_PLANS[0]['patient_id']) == [1]
