import logging

from django.db import transaction
from django.utils import timezone

from .entities import (
    Barrier, CareGoal, CarePlan, CarePlanStatus, CareReview, CareTeamMember, EntityType,
    GoalStatus, Intervention, ProgressEntry, next_review_after,
)
from .events import DomainEvent, get_event_sink
from .metrics import careplan_commands_total
from .exceptions import (
    BarrierAlreadyResolved, BarrierNotFound, CarePlanNotFound, GoalAlreadyAchieved,
    GoalDiscontinued, GoalNotFound, InterventionNotFound, ReviewAlreadyConducted,
    ReviewNotFound, ValidationError,
)
from .storage import CarePlanStorage
from .summary import SummaryProjector

logger = logging.getLogger(__name__)

U32_MAX = 2 ** 32 - 1
U64_MAX = 2 ** 64 - 1
NOTES_HASH_LENGTH = 32


def current_timestamp():
    return int(timezone.now().timestamp())


def check_unsigned(name, value, maximum=U64_MAX):
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= maximum:
        raise ValidationError(
            message=f"'{name}' must be an integer between 0 and {maximum}, got {value!r}.",
            detail={'field': name},
        )
    return value


def check_bool(name, value):
    if not isinstance(value, bool):
        raise ValidationError(
            message=f"'{name}' must be true or false, got {value!r}.",
            detail={'field': name},
        )
    return value


def check_string_list(name, value):
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValidationError(
            message=f"'{name}' must be a list of strings, got {value!r}.",
            detail={'field': name},
        )
    return list(value)


def check_notes_hash(value):
    if not isinstance(value, (bytes, bytearray)) or len(value) != NOTES_HASH_LENGTH:
        raise ValidationError(
            message=f"'review_notes_hash' must be exactly {NOTES_HASH_LENGTH} bytes.",
            detail={'field': 'review_notes_hash'},
        )
    return bytes(value)


def check_goal_open(goal):
    if goal.status == GoalStatus.ACHIEVED:
        raise GoalAlreadyAchieved(message=f"Goal #{goal.goal_id} has already been achieved.")
    if goal.status == GoalStatus.DISCONTINUED:
        raise GoalDiscontinued(message=f"Goal #{goal.goal_id} has been discontinued.")


class CarePlanService:
    """
    Command surface for care plans.

    Every command authorizes its principal through the injected gate, does all
    of its store/index work inside one transaction, then publishes exactly one
    event. Errors raised inside the transaction roll back every write,
    including id allocation.
    """

    def __init__(self, gate, events=None, storage=None, clock=None):
        self.gate = gate
        self.events = events if events is not None else get_event_sink()
        self.storage = storage or CarePlanStorage()
        self.clock = clock or current_timestamp
        self.projector = SummaryProjector(self.storage)

    def _emit(self, name, **payload):
        careplan_commands_total.labels(event=name).inc()
        self.events.publish(DomainEvent(name, payload))

    def _load_plan(self, care_plan_id):
        plan = self.storage.plans.load(care_plan_id)
        if plan is None:
            raise CarePlanNotFound(message=f"Care plan #{care_plan_id} does not exist.")
        return plan

    def _load_goal(self, goal_id):
        goal = self.storage.goals.load(goal_id)
        if goal is None:
            raise GoalNotFound(message=f"Goal #{goal_id} does not exist.")
        return goal

    def _load_barrier(self, barrier_id):
        barrier = self.storage.barriers.load(barrier_id)
        if barrier is None:
            raise BarrierNotFound(message=f"Barrier #{barrier_id} does not exist.")
        return barrier

    def _load_review(self, review_id):
        review = self.storage.reviews.load(review_id)
        if review is None:
            raise ReviewNotFound(message=f"Review #{review_id} does not exist.")
        return review

    # ── Care plan ─────────────────────────────────────────

    def create_care_plan(self, patient_id, provider_id, plan_type, conditions, goals,
                         start_date, review_frequency_days):
        self.gate.require_auth(provider_id)
        check_unsigned('start_date', start_date)
        check_unsigned('review_frequency_days', review_frequency_days, maximum=U32_MAX)
        conditions = check_string_list('conditions', conditions)
        goals = check_string_list('goals', goals)

        with transaction.atomic():
            care_plan_id = self.storage.ids.next(EntityType.CARE_PLAN)
            plan = CarePlan(
                care_plan_id=care_plan_id,
                patient_id=patient_id,
                provider_id=provider_id,
                plan_type=plan_type,
                conditions=conditions,
                goals=goals,
                start_date=start_date,
                review_frequency_days=review_frequency_days,
                next_review_date=next_review_after(start_date, review_frequency_days),
                created_at=self.clock(),
            )
            self.storage.plans.save(care_plan_id, plan)
            self.storage.patient_plans.append(patient_id, care_plan_id)

        logger.info(f"CarePlan #{care_plan_id} created for patient {patient_id} by {provider_id}")
        self._emit('care_plan_created', care_plan_id=care_plan_id,
                   patient_id=patient_id, provider_id=provider_id)
        return care_plan_id

    # ── Goals ─────────────────────────────────────────────

    def add_care_goal(self, care_plan_id, provider_id, goal_description, target_value,
                      target_date, priority):
        self.gate.require_auth(provider_id)
        check_unsigned('target_date', target_date)

        with transaction.atomic():
            self._load_plan(care_plan_id)
            goal_id = self.storage.ids.next(EntityType.GOAL)
            goal = CareGoal(
                goal_id=goal_id,
                care_plan_id=care_plan_id,
                description=goal_description,
                target_value=target_value,
                target_date=target_date,
                priority=priority,
                created_by=provider_id,
                created_at=self.clock(),
            )
            self.storage.goals.save(goal_id, goal)
            self.storage.plan_goals.append(care_plan_id, goal_id)

        logger.info(f"Goal #{goal_id} added to CarePlan #{care_plan_id}")
        self._emit('goal_added', care_plan_id=care_plan_id, goal_id=goal_id, provider_id=provider_id)
        return goal_id

    def record_goal_progress(self, goal_id, patient_id, current_value, progress_note, recorded_date):
        self.gate.require_auth(patient_id)
        check_unsigned('recorded_date', recorded_date)

        with transaction.atomic():
            goal = self._load_goal(goal_id)
            check_goal_open(goal)
            goal.progress_entries.append(ProgressEntry(
                goal_id=goal_id,
                patient_id=patient_id,
                current_value=current_value,
                progress_note=progress_note,
                recorded_date=recorded_date,
            ))
            self.storage.goals.save(goal_id, goal)

        logger.info(f"Progress recorded on Goal #{goal_id} by {patient_id}")
        self._emit('goal_progress_recorded', goal_id=goal_id, patient_id=patient_id)

    def mark_goal_achieved(self, goal_id, provider_id, achievement_date, outcome_notes):
        self.gate.require_auth(provider_id)
        check_unsigned('achievement_date', achievement_date)

        with transaction.atomic():
            goal = self._load_goal(goal_id)
            check_goal_open(goal)
            goal.status = GoalStatus.ACHIEVED
            goal.achievement_date = achievement_date
            goal.outcome_notes = outcome_notes
            self.storage.goals.save(goal_id, goal)

        logger.info(f"Goal #{goal_id} marked achieved by {provider_id}")
        self._emit('goal_achieved', goal_id=goal_id, provider_id=provider_id)

    # ── Interventions ─────────────────────────────────────

    def add_intervention(self, care_plan_id, provider_id, intervention_type, description,
                         frequency, responsible_party):
        self.gate.require_auth(provider_id)

        with transaction.atomic():
            self._load_plan(care_plan_id)
            intervention_id = self.storage.ids.next(EntityType.INTERVENTION)
            intervention = Intervention(
                intervention_id=intervention_id,
                care_plan_id=care_plan_id,
                intervention_type=intervention_type,
                description=description,
                frequency=frequency,
                responsible_party=responsible_party,
                assigned_by=provider_id,
                created_at=self.clock(),
            )
            self.storage.interventions.save(intervention_id, intervention)
            self.storage.plan_interventions.append(care_plan_id, intervention_id)

        logger.info(f"Intervention #{intervention_id} added to CarePlan #{care_plan_id}")
        self._emit('intervention_added', care_plan_id=care_plan_id,
                   intervention_id=intervention_id, provider_id=provider_id)
        return intervention_id

    # ── Barriers ──────────────────────────────────────────

    def add_barrier(self, care_plan_id, reporter, barrier_type, description, identified_date):
        self.gate.require_auth(reporter)
        check_unsigned('identified_date', identified_date)

        with transaction.atomic():
            self._load_plan(care_plan_id)
            barrier_id = self.storage.ids.next(EntityType.BARRIER)
            barrier = Barrier(
                barrier_id=barrier_id,
                care_plan_id=care_plan_id,
                reporter=reporter,
                barrier_type=barrier_type,
                description=description,
                identified_date=identified_date,
            )
            self.storage.barriers.save(barrier_id, barrier)
            self.storage.plan_barriers.append(care_plan_id, barrier_id)

        logger.info(f"Barrier #{barrier_id} reported on CarePlan #{care_plan_id} by {reporter}")
        self._emit('barrier_added', care_plan_id=care_plan_id, barrier_id=barrier_id, reporter=reporter)
        return barrier_id

    def resolve_barrier(self, barrier_id, provider_id, resolution, resolution_date):
        self.gate.require_auth(provider_id)
        check_unsigned('resolution_date', resolution_date)

        with transaction.atomic():
            barrier = self._load_barrier(barrier_id)
            if barrier.resolved:
                raise BarrierAlreadyResolved(message=f"Barrier #{barrier_id} is already resolved.")
            barrier.resolved = True
            barrier.resolution = resolution
            barrier.resolution_date = resolution_date
            barrier.resolved_by = provider_id
            self.storage.barriers.save(barrier_id, barrier)

        logger.info(f"Barrier #{barrier_id} resolved by {provider_id}")
        self._emit('barrier_resolved', barrier_id=barrier_id, provider_id=provider_id)

    # ── Reviews ───────────────────────────────────────────

    def schedule_care_plan_review(self, care_plan_id, provider_id, review_date, review_type):
        self.gate.require_auth(provider_id)
        check_unsigned('review_date', review_date)

        with transaction.atomic():
            self._load_plan(care_plan_id)
            review_id = self.storage.ids.next(EntityType.REVIEW)
            review = CareReview(
                review_id=review_id,
                care_plan_id=care_plan_id,
                scheduled_by=provider_id,
                review_date=review_date,
                review_type=review_type,
            )
            self.storage.reviews.save(review_id, review)
            self.storage.plan_reviews.append(care_plan_id, review_id)

        logger.info(f"Review #{review_id} scheduled for CarePlan #{care_plan_id} at {review_date}")
        self._emit('review_scheduled', care_plan_id=care_plan_id, review_id=review_id,
                   review_date=review_date, provider_id=provider_id)
        return review_id

    def conduct_care_plan_review(self, review_id, provider_id, review_notes_hash,
                                 plan_modifications, continue_plan):
        self.gate.require_auth(provider_id)
        review_notes_hash = check_notes_hash(review_notes_hash)
        plan_modifications = check_string_list('plan_modifications', plan_modifications)
        continue_plan = check_bool('continue_plan', continue_plan)

        with transaction.atomic():
            review = self._load_review(review_id)
            if review.conducted:
                raise ReviewAlreadyConducted(message=f"Review #{review_id} has already been conducted.")

            conducted_at = self.clock()
            review.conducted = True
            review.review_notes_hash = review_notes_hash
            review.plan_modifications = plan_modifications
            review.continue_plan = continue_plan
            review.conducted_by = provider_id
            review.conducted_at = conducted_at

            plan = self.storage.plans.load(review.care_plan_id)
            if plan is not None:
                plan.last_review_date = conducted_at
                plan.next_review_date = next_review_after(conducted_at, plan.review_frequency_days)
                if not continue_plan:
                    plan.status = CarePlanStatus.COMPLETED
                self.storage.plans.save(plan.care_plan_id, plan)

            self.storage.reviews.save(review_id, review)

        logger.info(f"Review #{review_id} conducted by {provider_id} (continue_plan={continue_plan})")
        self._emit('review_conducted', review_id=review_id, provider_id=provider_id,
                   continue_plan=continue_plan)

    # ── Care team ─────────────────────────────────────────

    def assign_care_team_member(self, care_plan_id, coordinating_provider, team_member, role,
                                responsibilities):
        self.gate.require_auth(coordinating_provider)
        responsibilities = check_string_list('responsibilities', responsibilities)

        with transaction.atomic():
            self._load_plan(care_plan_id)
            self.storage.add_team_member(CareTeamMember(
                care_plan_id=care_plan_id,
                team_member=team_member,
                role=role,
                responsibilities=responsibilities,
                assigned_by=coordinating_provider,
                assigned_at=self.clock(),
            ))

        logger.info(f"{team_member} assigned to CarePlan #{care_plan_id} as {role}")
        self._emit('team_member_assigned', care_plan_id=care_plan_id,
                   team_member=team_member, assigned_by=coordinating_provider)

    # ── Reads ─────────────────────────────────────────────

    def get_care_plan_summary(self, care_plan_id, requester):
        self.gate.require_auth(requester)
        summary = self.projector.project(care_plan_id)
        if summary is None:
            raise CarePlanNotFound(message=f"Care plan #{care_plan_id} does not exist.")
        return summary

    def get_care_plan(self, care_plan_id, requester):
        self.gate.require_auth(requester)
        return self._load_plan(care_plan_id)

    def get_care_goal(self, goal_id, requester):
        self.gate.require_auth(requester)
        return self._load_goal(goal_id)

    def get_intervention(self, intervention_id, requester):
        self.gate.require_auth(requester)
        intervention = self.storage.interventions.load(intervention_id)
        if intervention is None:
            raise InterventionNotFound(message=f"Intervention #{intervention_id} does not exist.")
        return intervention

    def get_barrier(self, barrier_id, requester):
        self.gate.require_auth(requester)
        return self._load_barrier(barrier_id)

    def get_care_review(self, review_id, requester):
        self.gate.require_auth(requester)
        return self._load_review(review_id)

    def list_plan_reviews(self, care_plan_id, requester):
        self.gate.require_auth(requester)
        self._load_plan(care_plan_id)
        return self.storage.reviews.load_many(self.storage.plan_reviews.list(care_plan_id))

    def list_patient_care_plans(self, patient_id, requester):
        self.gate.require_auth(requester)
        return self.storage.plans.load_many(self.storage.patient_plans.list(patient_id))
