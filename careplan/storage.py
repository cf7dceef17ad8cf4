"""
Persistent storage for care-plan records.

Three primitives over the Django ORM:

- IdentifierAllocator: one monotonic counter per entity type.
- EntityStore: whole-record get/set within one namespace. No delete.
- RelationshipIndex: append-only, ordered child keys per parent key.

None of them opens a transaction. Callers wrap a whole command in
transaction.atomic() so the counter bump, record save and index append
commit together or not at all.
"""

from django.db.models import F

from .entities import (
    Barrier, CareGoal, CarePlan, CareReview, CareTeamMember, EntityType, Intervention,
)
from .models import Counter, EntityRecord, IndexEntry


# ── Identifier allocation ────────────────────────────────

class IdentifierAllocator:

    def next(self, entity_type):
        counter, _ = Counter.objects.get_or_create(entity_type=EntityType(entity_type).value)
        Counter.objects.filter(pk=counter.pk).update(value=F('value') + 1)
        counter.refresh_from_db(fields=['value'])
        return counter.value

    def current(self, entity_type):
        counter = Counter.objects.filter(entity_type=EntityType(entity_type).value).first()
        return counter.value if counter else 0


# ── Entity records ───────────────────────────────────────

class EntityStore:

    def __init__(self, namespace, record_cls):
        self.namespace = EntityType(namespace).value
        self.record_cls = record_cls

    def save(self, key, record):
        EntityRecord.objects.update_or_create(
            namespace=self.namespace,
            key=str(key),
            defaults={'data': record.to_dict()},
        )

    def load(self, key):
        row = EntityRecord.objects.filter(namespace=self.namespace, key=str(key)).first()
        if row is None:
            return None
        return self.record_cls.from_dict(row.data)

    def load_many(self, keys):
        """Load records in key order, skipping keys with no stored record."""
        rows = {
            row.key: row.data
            for row in EntityRecord.objects.filter(
                namespace=self.namespace, key__in=[str(k) for k in keys],
            )
        }
        return [self.record_cls.from_dict(rows[str(k)]) for k in keys if str(k) in rows]


# ── Relationship indices ─────────────────────────────────

class RelationshipIndex:
    """
    parent key -> ordered list of child keys.

    Lists only grow. A filtered view (e.g. active goals) means loading every
    child record and filtering in memory.
    """

    def __init__(self, relation, child_type=int):
        self.relation = relation
        self.child_type = child_type

    def append(self, parent_key, child_key):
        position = IndexEntry.objects.filter(
            relation=self.relation, parent_key=str(parent_key),
        ).count()
        IndexEntry.objects.create(
            relation=self.relation,
            parent_key=str(parent_key),
            position=position,
            child_key=str(child_key),
        )
        return position

    def list(self, parent_key):
        keys = IndexEntry.objects.filter(
            relation=self.relation, parent_key=str(parent_key),
        ).order_by('position').values_list('child_key', flat=True)
        return [self.child_type(k) for k in keys]

    def count(self, parent_key):
        return IndexEntry.objects.filter(relation=self.relation, parent_key=str(parent_key)).count()


# ── Care-plan storage bundle ─────────────────────────────

def team_member_key(care_plan_id, position):
    return f"{care_plan_id}:{position}"


class CarePlanStorage:
    """Every store, index and counter the care-plan service touches."""

    def __init__(self):
        self.ids = IdentifierAllocator()

        self.plans = EntityStore(EntityType.CARE_PLAN, CarePlan)
        self.goals = EntityStore(EntityType.GOAL, CareGoal)
        self.interventions = EntityStore(EntityType.INTERVENTION, Intervention)
        self.barriers = EntityStore(EntityType.BARRIER, Barrier)
        self.reviews = EntityStore(EntityType.REVIEW, CareReview)
        self.team_members = EntityStore(EntityType.CARE_TEAM_MEMBER, CareTeamMember)

        self.plan_goals = RelationshipIndex('plan_goals')
        self.plan_interventions = RelationshipIndex('plan_interventions')
        self.plan_barriers = RelationshipIndex('plan_barriers')
        self.plan_reviews = RelationshipIndex('plan_reviews')
        self.plan_care_team = RelationshipIndex('plan_care_team', child_type=str)
        self.patient_plans = RelationshipIndex('patient_plans')

    def add_team_member(self, member):
        key = team_member_key(member.care_plan_id, self.plan_care_team.count(member.care_plan_id))
        self.team_members.save(key, member)
        self.plan_care_team.append(member.care_plan_id, key)
        return key

    def load_care_team(self, care_plan_id):
        return self.team_members.load_many(self.plan_care_team.list(care_plan_id))
