def serialize_summary(summary):
    return summary.to_dict()


def format_summary_download(summary):
    lines = [
        f"Care Plan #{summary.care_plan_id}",
        '=' * 40,
        f"Patient: {summary.patient_id}",
        f"Plan type: {summary.plan_type}",
        f"Status: {summary.status.value}",
        f"Last review: {summary.last_review_date if summary.last_review_date is not None else '-'}",
        f"Next review: {summary.next_review_date}",
        '=' * 40,
        '',
        '## Active Goals',
    ]
    lines += [f"{i}. {g.description} [{g.priority}, {g.status.value}]"
              for i, g in enumerate(summary.active_goals, 1)] or ['(none)']

    lines += ['', '## Interventions']
    lines += [f"{i}. {iv.description} ({iv.frequency}, {iv.responsible_party})"
              for i, iv in enumerate(summary.interventions, 1)] or ['(none)']

    lines += ['', '## Care Team']
    lines += [f"- {m.team_member}: {m.role}" for m in summary.care_team] or ['(none)']

    lines += ['', '## Barriers']
    lines += [f"{i}. {b.description} [{'resolved' if b.resolved else 'open'}]"
              for i, b in enumerate(summary.barriers, 1)] or ['(none)']

    return '\n'.join(lines) + '\n'
