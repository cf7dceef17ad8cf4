from django.core.management.base import BaseCommand

from careplan.auth import AllowListGate
from careplan.events import InMemoryEventSink
from careplan.models import Counter, EntityRecord, IndexEntry
from careplan.services import CarePlanService

DAY = 86_400
START = 1_735_689_600  # 2025-01-01T00:00:00Z

MOCK_PLANS = [
    {
        "patient_id": "patient:alice-johnson",
        "provider_id": "provider:dr-smith",
        "plan_type": "chronic_disease",
        "conditions": ["Type 2 Diabetes Mellitus (E11.9)"],
        "goals": ["HbA1c < 7% within 3 months", "No hypoglycemic episodes"],
        "review_frequency_days": 30,
        "care_goals": [
            {"description": "HbA1c below 7%", "target_value": "7.0", "days": 90, "priority": "high"},
            {"description": "Fasting glucose 80-130 mg/dL", "target_value": "130", "days": 60, "priority": "medium"},
        ],
        "interventions": [
            {"intervention_type": "medication", "description": "Metformin 500mg with meals",
             "frequency": "twice daily", "responsible_party": "patient"},
            {"intervention_type": "education", "description": "Diabetes self-management education",
             "frequency": "weekly", "responsible_party": "provider"},
        ],
        "barriers": [
            {"barrier_type": "financial", "description": "Cost of glucose test strips"},
        ],
        "team": [
            {"team_member": "provider:pharm-lee", "role": "pharmacist",
             "responsibilities": ["Medication reconciliation", "Dose titration"]},
        ],
    },
    {
        "patient_id": "patient:bob-williams",
        "provider_id": "provider:dr-chen",
        "plan_type": "chronic_disease",
        "conditions": ["Essential Hypertension (I10)"],
        "goals": ["Blood pressure < 130/80 mmHg"],
        "review_frequency_days": 14,
        "care_goals": [
            {"description": "Blood pressure below 130/80", "target_value": "130/80", "days": 28, "priority": "high"},
        ],
        "interventions": [
            {"intervention_type": "monitoring", "description": "Home blood pressure log",
             "frequency": "daily", "responsible_party": "patient"},
        ],
        "barriers": [],
        "team": [
            {"team_member": "caregiver:carol-williams", "role": "caregiver",
             "responsibilities": ["Medication reminders"]},
        ],
    },
    {
        "patient_id": "patient:dana-lopez",
        "provider_id": "provider:dr-patel",
        "plan_type": "post_op",
        "conditions": ["Status post total knee arthroplasty (Z96.651)"],
        "goals": ["Independent ambulation without assistive device"],
        "review_frequency_days": 7,
        "care_goals": [
            {"description": "Knee flexion to 110 degrees", "target_value": "110", "days": 42, "priority": "high"},
        ],
        "interventions": [
            {"intervention_type": "therapy", "description": "Physical therapy session",
             "frequency": "3x weekly", "responsible_party": "provider"},
        ],
        "barriers": [
            {"barrier_type": "transportation", "description": "No ride to therapy appointments"},
        ],
        "team": [],
    },
]


class Command(BaseCommand):
    help = "Seed database with mock care plans, goals, interventions and reviews"

    def add_arguments(self, parser):
        parser.add_argument('--clear', action='store_true', help='Wipe care-plan storage first')

    def handle(self, *args, **options):
        if options['clear']:
            count = EntityRecord.objects.count()
            self.stdout.write(f"Clearing {count} stored records...")
            IndexEntry.objects.all().delete()
            EntityRecord.objects.all().delete()
            Counter.objects.all().delete()

        principals = {p['provider_id'] for p in MOCK_PLANS} | {p['patient_id'] for p in MOCK_PLANS}
        events = InMemoryEventSink()
        service = CarePlanService(gate=AllowListGate(principals), events=events)

        for data in MOCK_PLANS:
            provider = data['provider_id']
            plan_id = service.create_care_plan(
                patient_id=data['patient_id'],
                provider_id=provider,
                plan_type=data['plan_type'],
                conditions=data['conditions'],
                goals=data['goals'],
                start_date=START,
                review_frequency_days=data['review_frequency_days'],
            )
            for goal in data['care_goals']:
                service.add_care_goal(plan_id, provider, goal['description'], goal['target_value'],
                                      START + goal['days'] * DAY, goal['priority'])
            for intervention in data['interventions']:
                service.add_intervention(plan_id, provider, **intervention)
            for barrier in data['barriers']:
                service.add_barrier(plan_id, data['patient_id'], barrier['barrier_type'],
                                    barrier['description'], START)
            for member in data['team']:
                service.assign_care_team_member(plan_id, provider, **member)
            service.schedule_care_plan_review(plan_id, provider,
                                              START + data['review_frequency_days'] * DAY, 'routine')

            self.stdout.write(f"  CarePlan #{plan_id} for {data['patient_id']} ({data['plan_type']})")

        self.stdout.write(self.style.SUCCESS(
            f"Created {len(MOCK_PLANS)} mock care plans ({len(events.events)} events)!"
        ))
