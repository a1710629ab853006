"""Context builders.

Pure serialization of user data into text blocks that are prepended to
the first outgoing message of a conversation. The block layouts are part
of the prompt contract with the system instructions, so they are fixed.
"""

import json
from collections.abc import Sequence

from .models import GenerationOptions, StudySession, SubjectGrade, Task, Timetable, UserProfile

ORGANIZATION_HEADER = "[SYSTEM DATA INJECTION - STRICT CONTEXT]"
ANALYTICS_HEADER = "[SYSTEM DATA INJECTION - ANALYTICS]"
PROFILE_HEADER = "[SYSTEM CONTEXT: USER PROFILE]"

NO_TIMETABLE = "No fixed timetable provided."


def _task_line(task: Task) -> str:
    status = "COMPLETED" if task.is_completed else "TODO"
    line = f"- [{status}] {task.title} (Due: {task.due_date or 'N/A'})"
    if task.comment:
        line += f" Note: {task.comment}"
    return line


def has_planning_data(timetable: Timetable, tasks: Sequence[Task]) -> bool:
    """Whether there is anything worth injecting in organization mode."""
    return bool(tasks) or bool(timetable.content.strip())


def has_study_data(sessions: Sequence[StudySession], grades: Sequence[SubjectGrade]) -> bool:
    """Whether there is anything worth injecting in analytics mode."""
    return bool(sessions) or bool(grades)


def build_organization_context(timetable: Timetable, tasks: Sequence[Task]) -> str:
    """Serialize the timetable and task list.

    Args:
        timetable: Free-text schedule
        tasks: Tasks in display order

    Returns:
        Context block starting with ORGANIZATION_HEADER
    """
    lines = [
        ORGANIZATION_HEADER,
        "The user has provided the following personal data. USE THIS to generate the response.",
        "",
        "CURRENT TIMETABLE:",
        timetable.content.strip() or NO_TIMETABLE,
        "",
        "CURRENT TASK LIST:",
        *(_task_line(task) for task in tasks),
        "",
        "INSTRUCTION: Analyze this data to provide a concrete, realistic plan.",
    ]
    return "\n".join(lines)


def build_profile_context(profile: UserProfile) -> str:
    """Serialize the user profile."""
    return "\n".join([
        PROFILE_HEADER,
        f"User Name: {profile.name}",
        f"User Bio: {profile.bio}",
        "",
        "INSTRUCTION: Address the user by their name occasionally. Adapt your tone to be "
        "personalized, encouraging, and relevant to their bio.",
    ])


def build_analytics_context(
    sessions: Sequence[StudySession],
    grades: Sequence[SubjectGrade],
) -> str:
    """Serialize study sessions and grades.

    Args:
        sessions: Logged study sessions
        grades: Recorded grades

    Returns:
        Context block starting with ANALYTICS_HEADER
    """
    total_minutes = sum(session.duration_minutes for session in sessions)
    hours, minutes = divmod(total_minutes, 60)

    minutes_by_subject: dict[str, int] = {}
    for session in sessions:
        minutes_by_subject[session.subject] = (
            minutes_by_subject.get(session.subject, 0) + session.duration_minutes
        )

    grade_records = [
        {
            "subject": grade.subject,
            "grade": grade.grade,
            "maxGrade": grade.max_grade,
            "date": grade.date.date().isoformat(),
        }
        for grade in grades
    ]

    return "\n".join([
        ANALYTICS_HEADER,
        "RAW STUDY DATA:",
        f"- Total Study Time: {hours}h {minutes}m",
        f"- Sessions Count: {len(sessions)}",
        f"- Time per Subject: {_compact_json(minutes_by_subject)}",
        f"- Grades/Performance: {_compact_json(grade_records)}",
        "",
        "INSTRUCTION: Act as an expert data analyst. Use these numbers to derive insights. "
        "Highlight strengths and weaknesses. Warn if study time doesn't correlate with grades.",
    ])


def wrap_user_request(blocks: Sequence[str], text: str) -> str:
    """Prefix a user message with one or more context blocks."""
    if not blocks:
        return text
    return "\n\n".join(blocks) + f"\n\nUser Request: {text}"


def apply_generation_options(text: str, options: GenerationOptions) -> str:
    """Append non-default generation options to a message."""
    if options.is_default:
        return text
    defaults = GenerationOptions()
    params = []
    if options.level != defaults.level:
        params.append(f"Niveau Cible: {options.level}")
    if options.response_format != defaults.response_format:
        params.append(f"Format de Réponse: {options.response_format}")
    if options.tone != defaults.tone:
        params.append(f"Ton/Style: {options.tone}")
    return f"{text}\n\n[INSTRUCTIONS DE GÉNÉRATION: {' | '.join(params)}]"


def _compact_json(value: object) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def build_improve_prompt(code: str, language: str = "") -> str:
    """Prompt asking the model to review a code block from a reply."""
    return f"Review and improve this {language} code:\n```{language}\n{code}\n```"
