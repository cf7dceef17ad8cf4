"""
Care-plan records.

Plain dataclasses: the storage layer persists them as JSON via to_dict() and
rebuilds them with from_dict(). Relationships are stored ids, never object
references.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import List, Optional

SECONDS_PER_DAY = 86_400


class EntityType(str, Enum):
    CARE_PLAN = 'care_plan'
    GOAL = 'goal'
    INTERVENTION = 'intervention'
    BARRIER = 'barrier'
    REVIEW = 'review'
    CARE_TEAM_MEMBER = 'care_team_member'


class GoalStatus(str, Enum):
    ACTIVE = 'active'
    ON_TRACK = 'on_track'
    AT_RISK = 'at_risk'
    ACHIEVED = 'achieved'
    DISCONTINUED = 'discontinued'

    @property
    def is_terminal(self):
        return self in (GoalStatus.ACHIEVED, GoalStatus.DISCONTINUED)


class CarePlanStatus(str, Enum):
    ACTIVE = 'active'
    UNDER_REVIEW = 'under_review'
    COMPLETED = 'completed'
    DISCONTINUED = 'discontinued'


def next_review_after(timestamp, review_frequency_days):
    return timestamp + review_frequency_days * SECONDS_PER_DAY


def _encode(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, list):
        return [_encode(v) for v in value]
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    return value


class Record:
    def to_dict(self):
        return _encode(asdict(self))

    @classmethod
    def from_dict(cls, data):
        return cls(**data)


@dataclass
class CarePlan(Record):
    care_plan_id: int
    patient_id: str
    provider_id: str
    plan_type: str
    conditions: List[str]
    goals: List[str]
    start_date: int
    review_frequency_days: int
    next_review_date: int
    created_at: int
    status: CarePlanStatus = CarePlanStatus.ACTIVE
    last_review_date: Optional[int] = None

    @classmethod
    def from_dict(cls, data):
        return cls(**{**data, 'status': CarePlanStatus(data['status'])})


@dataclass
class ProgressEntry(Record):
    goal_id: int
    patient_id: str
    current_value: str
    progress_note: str
    recorded_date: int


@dataclass
class CareGoal(Record):
    goal_id: int
    care_plan_id: int
    description: str
    target_value: Optional[str]
    target_date: int
    priority: str
    created_by: str
    created_at: int
    status: GoalStatus = GoalStatus.ACTIVE
    progress_entries: List[ProgressEntry] = field(default_factory=list)
    achievement_date: Optional[int] = None
    outcome_notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        return cls(**{
            **data,
            'status': GoalStatus(data['status']),
            'progress_entries': [ProgressEntry.from_dict(e) for e in data.get('progress_entries', [])],
        })


@dataclass
class Intervention(Record):
    intervention_id: int
    care_plan_id: int
    intervention_type: str
    description: str
    frequency: str
    # patient | provider | caregiver
    responsible_party: str
    assigned_by: str
    created_at: int


@dataclass
class Barrier(Record):
    barrier_id: int
    care_plan_id: int
    reporter: str
    barrier_type: str
    description: str
    identified_date: int
    resolved: bool = False
    resolution: Optional[str] = None
    resolution_date: Optional[int] = None
    resolved_by: Optional[str] = None


@dataclass
class CareReview(Record):
    review_id: int
    care_plan_id: int
    scheduled_by: str
    review_date: int
    review_type: str
    conducted: bool = False
    review_notes_hash: Optional[bytes] = None
    plan_modifications: List[str] = field(default_factory=list)
    continue_plan: bool = True
    conducted_by: Optional[str] = None
    conducted_at: Optional[int] = None

    @classmethod
    def from_dict(cls, data):
        notes_hash = data.get('review_notes_hash')
        return cls(**{
            **data,
            'review_notes_hash': bytes.fromhex(notes_hash) if notes_hash else None,
        })


@dataclass
class CareTeamMember(Record):
    care_plan_id: int
    team_member: str
    role: str
    responsibilities: List[str]
    assigned_by: str
    assigned_at: int


@dataclass
class CarePlanSummary(Record):
    care_plan_id: int
    patient_id: str
    plan_type: str
    status: CarePlanStatus
    active_goals: List[CareGoal]
    interventions: List[Intervention]
    care_team: List[CareTeamMember]
    barriers: List[Barrier]
    last_review_date: Optional[int]
    next_review_date: int
