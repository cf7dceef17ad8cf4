import json
import re

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .auth import SignedPrincipalGate
from .exceptions import ValidationError
from .serializers import format_summary_download, serialize_summary
from .services import CarePlanService

HEX_DIGEST = re.compile(r"[0-9a-fA-F]{64}")


def service_for(request):
    return CarePlanService(gate=SignedPrincipalGate.from_request(request))


def parse_body(request, *required):
    try:
        data = json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        raise ValidationError(message='Request body must be valid JSON.')
    if not isinstance(data, dict):
        raise ValidationError(message='Request body must be a JSON object.')

    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            message=f"Missing fields: {', '.join(missing)}",
            detail={'missing': missing},
        )
    return data


def requester_of(request):
    requester = request.GET.get('requester', '').strip()
    if not requester:
        raise ValidationError(message="Query parameter 'requester' is required.")
    return requester


def created(entity_id):
    return JsonResponse({'id': entity_id}, status=201)


def ok():
    return JsonResponse({'status': 'ok'})


# ── Care plans ───────────────────────────────────────────

@csrf_exempt
@require_http_methods(["POST"])
def create_care_plan(request):
    data = parse_body(request, 'patient_id', 'provider_id', 'plan_type', 'start_date',
                      'review_frequency_days')
    care_plan_id = service_for(request).create_care_plan(
        patient_id=data['patient_id'],
        provider_id=data['provider_id'],
        plan_type=data['plan_type'],
        conditions=data.get('conditions', []),
        goals=data.get('goals', []),
        start_date=data['start_date'],
        review_frequency_days=data['review_frequency_days'],
    )
    return created(care_plan_id)


@require_http_methods(["GET"])
def care_plan_detail(request, pk):
    plan = service_for(request).get_care_plan(pk, requester_of(request))
    return JsonResponse(plan.to_dict())


@require_http_methods(["GET"])
def care_plan_summary(request, pk):
    summary = service_for(request).get_care_plan_summary(pk, requester_of(request))
    return JsonResponse(serialize_summary(summary))


@require_http_methods(["GET"])
def download_care_plan_summary(request, pk):
    summary = service_for(request).get_care_plan_summary(pk, requester_of(request))
    response = HttpResponse(format_summary_download(summary), content_type='text/plain')
    response['Content-Disposition'] = f'attachment; filename="careplan_{pk}.txt"'
    return response


@require_http_methods(["GET"])
def patient_care_plans(request, patient_id):
    plans = service_for(request).list_patient_care_plans(patient_id, requester_of(request))
    return JsonResponse([p.to_dict() for p in plans], safe=False)


# ── Goals ────────────────────────────────────────────────

@csrf_exempt
@require_http_methods(["POST"])
def add_care_goal(request, pk):
    data = parse_body(request, 'provider_id', 'description', 'target_date', 'priority')
    goal_id = service_for(request).add_care_goal(
        care_plan_id=pk,
        provider_id=data['provider_id'],
        goal_description=data['description'],
        target_value=data.get('target_value'),
        target_date=data['target_date'],
        priority=data['priority'],
    )
    return created(goal_id)


@require_http_methods(["GET"])
def goal_detail(request, pk):
    goal = service_for(request).get_care_goal(pk, requester_of(request))
    return JsonResponse(goal.to_dict())


@csrf_exempt
@require_http_methods(["POST"])
def record_goal_progress(request, pk):
    data = parse_body(request, 'patient_id', 'current_value', 'recorded_date')
    service_for(request).record_goal_progress(
        goal_id=pk,
        patient_id=data['patient_id'],
        current_value=data['current_value'],
        progress_note=data.get('progress_note', ''),
        recorded_date=data['recorded_date'],
    )
    return ok()


@csrf_exempt
@require_http_methods(["POST"])
def mark_goal_achieved(request, pk):
    data = parse_body(request, 'provider_id', 'achievement_date')
    service_for(request).mark_goal_achieved(
        goal_id=pk,
        provider_id=data['provider_id'],
        achievement_date=data['achievement_date'],
        outcome_notes=data.get('outcome_notes', ''),
    )
    return ok()


# ── Interventions ────────────────────────────────────────

@csrf_exempt
@require_http_methods(["POST"])
def add_intervention(request, pk):
    data = parse_body(request, 'provider_id', 'intervention_type', 'description', 'frequency',
                      'responsible_party')
    intervention_id = service_for(request).add_intervention(
        care_plan_id=pk,
        provider_id=data['provider_id'],
        intervention_type=data['intervention_type'],
        description=data['description'],
        frequency=data['frequency'],
        responsible_party=data['responsible_party'],
    )
    return created(intervention_id)


@require_http_methods(["GET"])
def intervention_detail(request, pk):
    intervention = service_for(request).get_intervention(pk, requester_of(request))
    return JsonResponse(intervention.to_dict())


# ── Barriers ─────────────────────────────────────────────

@csrf_exempt
@require_http_methods(["POST"])
def add_barrier(request, pk):
    data = parse_body(request, 'reporter', 'barrier_type', 'description', 'identified_date')
    barrier_id = service_for(request).add_barrier(
        care_plan_id=pk,
        reporter=data['reporter'],
        barrier_type=data['barrier_type'],
        description=data['description'],
        identified_date=data['identified_date'],
    )
    return created(barrier_id)


@require_http_methods(["GET"])
def barrier_detail(request, pk):
    barrier = service_for(request).get_barrier(pk, requester_of(request))
    return JsonResponse(barrier.to_dict())


@csrf_exempt
@require_http_methods(["POST"])
def resolve_barrier(request, pk):
    data = parse_body(request, 'provider_id', 'resolution', 'resolution_date')
    service_for(request).resolve_barrier(
        barrier_id=pk,
        provider_id=data['provider_id'],
        resolution=data['resolution'],
        resolution_date=data['resolution_date'],
    )
    return ok()


# ── Reviews ──────────────────────────────────────────────

@csrf_exempt
@require_http_methods(["GET", "POST"])
def care_plan_reviews(request, pk):
    if request.method == 'GET':
        reviews = service_for(request).list_plan_reviews(pk, requester_of(request))
        return JsonResponse([r.to_dict() for r in reviews], safe=False)

    data = parse_body(request, 'provider_id', 'review_date', 'review_type')
    review_id = service_for(request).schedule_care_plan_review(
        care_plan_id=pk,
        provider_id=data['provider_id'],
        review_date=data['review_date'],
        review_type=data['review_type'],
    )
    return created(review_id)


@require_http_methods(["GET"])
def review_detail(request, pk):
    review = service_for(request).get_care_review(pk, requester_of(request))
    return JsonResponse(review.to_dict())


@csrf_exempt
@require_http_methods(["POST"])
def conduct_care_plan_review(request, pk):
    data = parse_body(request, 'provider_id', 'review_notes_hash')
    raw_hash = data['review_notes_hash']
    if not isinstance(raw_hash, str) or not HEX_DIGEST.fullmatch(raw_hash):
        raise ValidationError(
            message="'review_notes_hash' must be 64 hex characters.",
            detail={'field': 'review_notes_hash'},
        )
    service_for(request).conduct_care_plan_review(
        review_id=pk,
        provider_id=data['provider_id'],
        review_notes_hash=bytes.fromhex(raw_hash),
        plan_modifications=data.get('plan_modifications', []),
        continue_plan=data.get('continue_plan', True),
    )
    return ok()


# ── Care team ────────────────────────────────────────────

@csrf_exempt
@require_http_methods(["POST"])
def assign_care_team_member(request, pk):
    data = parse_body(request, 'coordinating_provider', 'team_member', 'role')
    service_for(request).assign_care_team_member(
        care_plan_id=pk,
        coordinating_provider=data['coordinating_provider'],
        team_member=data['team_member'],
        role=data['role'],
        responsibilities=data.get('responsibilities', []),
    )
    return ok()


# ── Metrics ──────────────────────────────────────────────

@require_http_methods(["GET"])
def metrics(request):
    return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)
