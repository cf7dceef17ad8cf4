from .entities import CarePlanSummary


class SummaryProjector:
    """
    Read-only view of a plan across all of its indices.

    Goals are filtered to the non-terminal ones; barriers are returned in
    full, resolved or not.
    """

    def __init__(self, storage):
        self.storage = storage

    def active_goals(self, care_plan_id):
        goals = self.storage.goals.load_many(self.storage.plan_goals.list(care_plan_id))
        return [g for g in goals if not g.status.is_terminal]

    def project(self, care_plan_id):
        plan = self.storage.plans.load(care_plan_id)
        if plan is None:
            return None

        storage = self.storage
        return CarePlanSummary(
            care_plan_id=plan.care_plan_id,
            patient_id=plan.patient_id,
            plan_type=plan.plan_type,
            status=plan.status,
            active_goals=self.active_goals(care_plan_id),
            interventions=storage.interventions.load_many(storage.plan_interventions.list(care_plan_id)),
            care_team=storage.load_care_team(care_plan_id),
            barriers=storage.barriers.load_many(storage.plan_barriers.list(care_plan_id)),
            last_review_date=plan.last_review_date,
            next_review_date=plan.next_review_date,
        )
