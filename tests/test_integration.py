"""
Integration tests — test the full HTTP request → response cycle.

These tests hit the actual Django views (via test client),
go through middleware, services, and database.
"""

import json

import pytest

from careplan.auth import sign_principal
from careplan.models import Counter

PATIENT = 'patient:john-doe'
PROVIDER = 'provider:dr-smith'

VALID_PAYLOAD = {
    'patient_id': PATIENT,
    'provider_id': PROVIDER,
    'plan_type': 'chronic_disease',
    'conditions': ['Essential Hypertension (I10)'],
    'goals': ['BP < 130/80'],
    'start_date': 1000,
    'review_frequency_days': 7,
}


def proof(*principals):
    return {'HTTP_X_PRINCIPAL_PROOF': ','.join(sign_principal(p) for p in principals)}


def post(client, url, payload, *principals):
    return client.post(url, data=json.dumps(payload), content_type='application/json', **proof(*principals))


@pytest.fixture
def plan_id(client, db):
    response = post(client, '/api/careplans/', VALID_PAYLOAD, PROVIDER)
    return response.json()['id']


# ── Happy path ────────────────────────────────────────────

@pytest.mark.django_db
def test_create_care_plan_success(client):
    """POST valid data with provider proof → 201 + id."""
    response = post(client, '/api/careplans/', VALID_PAYLOAD, PROVIDER)

    assert response.status_code == 201
    assert response.json() == {'id': 1}


@pytest.mark.django_db
def test_full_plan_lifecycle(client, plan_id):
    goal = post(client, f'/api/careplans/{plan_id}/goals/',
                {'provider_id': PROVIDER, 'description': 'BP below 130/80', 'target_date': 9000,
                 'priority': 'high'}, PROVIDER).json()['id']
    post(client, f'/api/careplans/{plan_id}/interventions/',
         {'provider_id': PROVIDER, 'intervention_type': 'medication', 'description': 'Lisinopril',
          'frequency': 'daily', 'responsible_party': 'patient'}, PROVIDER)
    barrier = post(client, f'/api/careplans/{plan_id}/barriers/',
                   {'reporter': PATIENT, 'barrier_type': 'financial', 'description': 'Copay',
                    'identified_date': 1500}, PATIENT).json()['id']
    post(client, f'/api/careplans/{plan_id}/team/',
         {'coordinating_provider': PROVIDER, 'team_member': 'provider:nurse-kim', 'role': 'nurse'}, PROVIDER)

    progress = post(client, f'/api/goals/{goal}/progress/',
                    {'patient_id': PATIENT, 'current_value': '138/88', 'recorded_date': 2000}, PATIENT)
    resolve = post(client, f'/api/barriers/{barrier}/resolve/',
                   {'provider_id': PROVIDER, 'resolution': 'Coupon', 'resolution_date': 2500}, PROVIDER)

    assert progress.json() == {'status': 'ok'}
    assert resolve.status_code == 200

    summary = client.get(f'/api/careplans/{plan_id}/summary/?requester={PATIENT}', **proof(PATIENT)).json()
    assert summary['care_plan_id'] == plan_id
    assert summary['next_review_date'] == 605800
    assert len(summary['active_goals']) == 1
    assert summary['active_goals'][0]['progress_entries'][0]['current_value'] == '138/88'
    assert len(summary['interventions']) == 1
    assert summary['care_team'][0]['role'] == 'nurse'
    assert summary['barriers'][0]['resolved'] is True


@pytest.mark.django_db
def test_conduct_review_over_http(client, plan_id):
    review = post(client, f'/api/careplans/{plan_id}/reviews/',
                  {'provider_id': PROVIDER, 'review_date': 605800, 'review_type': 'routine'}, PROVIDER).json()['id']

    response = post(client, f'/api/reviews/{review}/conduct/',
                    {'provider_id': PROVIDER, 'review_notes_hash': 'ab' * 32,
                     'plan_modifications': ['Close plan'], 'continue_plan': False}, PROVIDER)

    assert response.status_code == 200
    plan = client.get(f'/api/careplans/{plan_id}/?requester={PROVIDER}', **proof(PROVIDER)).json()
    assert plan['status'] == 'completed'
    detail = client.get(f'/api/reviews/{review}/?requester={PROVIDER}', **proof(PROVIDER)).json()
    assert detail['review_notes_hash'] == 'ab' * 32
    listing = client.get(f'/api/careplans/{plan_id}/reviews/?requester={PROVIDER}', **proof(PROVIDER)).json()
    assert [r['review_id'] for r in listing] == [review]


@pytest.mark.django_db
def test_patient_care_plans_listing(client, plan_id):
    response = client.get(f'/api/patients/{PATIENT}/careplans/?requester={PATIENT}', **proof(PATIENT))

    assert response.status_code == 200
    assert [p['care_plan_id'] for p in response.json()] == [plan_id]


@pytest.mark.django_db
def test_summary_download(client, plan_id):
    response = client.get(f'/api/careplans/{plan_id}/summary/download/?requester={PROVIDER}', **proof(PROVIDER))

    assert response.status_code == 200
    assert response['Content-Disposition'] == f'attachment; filename="careplan_{plan_id}.txt"'
    assert f"Care Plan #{plan_id}" in response.content.decode()


# ── Errors ────────────────────────────────────────────────

@pytest.mark.django_db
def test_missing_proof_returns_403_and_allocates_nothing(client):
    response = client.post('/api/careplans/', data=json.dumps(VALID_PAYLOAD), content_type='application/json')

    assert response.status_code == 403
    assert response.json()['code'] == 'unauthorized'
    assert Counter.objects.count() == 0


@pytest.mark.django_db
def test_proof_for_wrong_principal_returns_403(client):
    response = post(client, '/api/careplans/', VALID_PAYLOAD, PATIENT)

    assert response.status_code == 403


@pytest.mark.django_db
def test_goal_on_missing_plan_returns_404(client):
    response = post(client, '/api/careplans/77/goals/',
                    {'provider_id': PROVIDER, 'description': 'x', 'target_date': 1, 'priority': 'low'}, PROVIDER)

    assert response.status_code == 404
    assert response.json()['code'] == 'care_plan_not_found'


@pytest.mark.django_db
def test_achieving_goal_twice_returns_409(client, plan_id):
    goal = post(client, f'/api/careplans/{plan_id}/goals/',
                {'provider_id': PROVIDER, 'description': 'x', 'target_date': 1, 'priority': 'low'},
                PROVIDER).json()['id']
    payload = {'provider_id': PROVIDER, 'achievement_date': 10, 'outcome_notes': 'done'}
    post(client, f'/api/goals/{goal}/achieve/', payload, PROVIDER)

    response = post(client, f'/api/goals/{goal}/achieve/', payload, PROVIDER)

    assert response.status_code == 409
    assert response.json()['code'] == 'goal_already_achieved'
    assert response.json()['error_code'] == 7


@pytest.mark.django_db
def test_missing_fields_returns_400(client):
    response = post(client, '/api/careplans/', {'patient_id': PATIENT}, PROVIDER)

    assert response.status_code == 400
    assert 'provider_id' in response.json()['detail']['missing']


@pytest.mark.django_db
def test_bad_hash_returns_400(client, plan_id):
    review = post(client, f'/api/careplans/{plan_id}/reviews/',
                  {'provider_id': PROVIDER, 'review_date': 1, 'review_type': 'routine'}, PROVIDER).json()['id']

    response = post(client, f'/api/reviews/{review}/conduct/',
                    {'provider_id': PROVIDER, 'review_notes_hash': 'not-hex'}, PROVIDER)

    assert response.status_code == 400


@pytest.mark.django_db
def test_string_continue_plan_returns_400(client, plan_id):
    review = post(client, f'/api/careplans/{plan_id}/reviews/',
                  {'provider_id': PROVIDER, 'review_date': 1, 'review_type': 'routine'}, PROVIDER).json()['id']

    response = post(client, f'/api/reviews/{review}/conduct/',
                    {'provider_id': PROVIDER, 'review_notes_hash': 'ab' * 32, 'continue_plan': 'false'}, PROVIDER)

    assert response.status_code == 400
    assert response.json()['detail'] == {'field': 'continue_plan'}
    detail = client.get(f'/api/reviews/{review}/?requester={PROVIDER}', **proof(PROVIDER)).json()
    assert detail['conducted'] is False


@pytest.mark.django_db
@pytest.mark.parametrize('notes_hash', [
    'ab ' + 'ab' * 31,
    ' ' + 'ab' * 32,
    'ab' * 33,
    'ab' * 31,
    'zz' * 32,
    32,
])
def test_malformed_hash_returns_400(client, plan_id, notes_hash):
    review = post(client, f'/api/careplans/{plan_id}/reviews/',
                  {'provider_id': PROVIDER, 'review_date': 1, 'review_type': 'routine'}, PROVIDER).json()['id']

    response = post(client, f'/api/reviews/{review}/conduct/',
                    {'provider_id': PROVIDER, 'review_notes_hash': notes_hash}, PROVIDER)

    assert response.status_code == 400
    assert response.json()['detail'] == {'field': 'review_notes_hash'}


@pytest.mark.django_db
def test_string_conditions_returns_400_and_allocates_nothing(client):
    response = post(client, '/api/careplans/', {**VALID_PAYLOAD, 'conditions': 'Hypertension'}, PROVIDER)

    assert response.status_code == 400
    assert response.json()['detail'] == {'field': 'conditions'}
    assert not Counter.objects.exists()


@pytest.mark.django_db
def test_string_responsibilities_returns_400(client, plan_id):
    response = post(client, f'/api/careplans/{plan_id}/team/',
                    {'coordinating_provider': PROVIDER, 'team_member': 'provider:nurse-kim', 'role': 'nurse',
                     'responsibilities': 'Vitals'}, PROVIDER)

    assert response.status_code == 400


@pytest.mark.django_db
def test_read_without_requester_returns_400(client, plan_id):
    response = client.get(f'/api/careplans/{plan_id}/summary/', **proof(PROVIDER))

    assert response.status_code == 400


# ── Metrics ───────────────────────────────────────────────

@pytest.mark.django_db
def test_metrics_endpoint_exposes_command_counter(client, plan_id):
    response = client.get('/metrics/')

    assert response.status_code == 200
    assert b'careplan_commands_total{event="care_plan_created"}' in response.content
