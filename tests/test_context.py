"""Unit tests for the context builders."""
import json
from datetime import datetime

from brainassist.chat.context import (
    ANALYTICS_HEADER,
    NO_TIMETABLE,
    ORGANIZATION_HEADER,
    PROFILE_HEADER,
    apply_generation_options,
    build_analytics_context,
    build_improve_prompt,
    build_organization_context,
    build_profile_context,
    has_planning_data,
    has_study_data,
    wrap_user_request,
)
from brainassist.chat.models import GenerationOptions, StudySession, SubjectGrade, Task, Timetable, UserProfile


class TestOrganizationContext:
    """Tests for build_organization_context()."""

    def test_layout(self):
        """Test the exact block layout."""
        tasks = [
            Task(title="Réviser maths", due_date="2026-10-20"),
            Task(title="Rendre TP", is_completed=True, comment="salle B12"),
        ]
        block = build_organization_context(Timetable(content="Lundi: 8h-12h"), tasks)

        assert block.split("\n") == [
            ORGANIZATION_HEADER,
            "The user has provided the following personal data. USE THIS to generate the response.",
            "",
            "CURRENT TIMETABLE:",
            "Lundi: 8h-12h",
            "",
            "CURRENT TASK LIST:",
            "- [TODO] Réviser maths (Due: 2026-10-20)",
            "- [COMPLETED] Rendre TP (Due: N/A) Note: salle B12",
            "",
            "INSTRUCTION: Analyze this data to provide a concrete, realistic plan.",
        ]

    def test_empty_timetable_placeholder(self):
        """Test that an empty timetable is replaced by the fixed sentence."""
        block = build_organization_context(Timetable(content="   "), [Task(title="x")])
        assert NO_TIMETABLE in block

    def test_has_planning_data(self):
        """Test detection of injectable planning data."""
        assert not has_planning_data(Timetable(), [])
        assert not has_planning_data(Timetable(content="\n "), [])
        assert has_planning_data(Timetable(content="Mardi"), [])
        assert has_planning_data(Timetable(), [Task(title="x")])


class TestAnalyticsContext:
    """Tests for build_analytics_context()."""

    def test_totals_and_json(self):
        """Test the aggregated study time and compact JSON payloads."""
        sessions = [
            StudySession(subject="Maths", duration_minutes=90),
            StudySession(subject="Physique", duration_minutes=45),
            StudySession(subject="Maths", duration_minutes=30),
        ]
        grades = [SubjectGrade(subject="Maths", grade=15, date=datetime(2026, 10, 1, 9, 30))]
        block = build_analytics_context(sessions, grades)
        lines = block.split("\n")

        assert lines[0] == ANALYTICS_HEADER
        assert "- Total Study Time: 2h 45m" in lines
        assert "- Sessions Count: 3" in lines

        per_subject = next(line for line in lines if line.startswith("- Time per Subject: "))
        assert json.loads(per_subject.removeprefix("- Time per Subject: ")) == {"Maths": 120, "Physique": 45}

        grades_line = next(line for line in lines if line.startswith("- Grades/Performance: "))
        assert json.loads(grades_line.removeprefix("- Grades/Performance: ")) == [
            {"subject": "Maths", "grade": 15.0, "maxGrade": 20.0, "date": "2026-10-01"}
        ]

    def test_non_ascii_kept(self):
        """Test that subject names are not escaped."""
        block = build_analytics_context([StudySession(subject="Français", duration_minutes=10)], [])
        assert '{"Français":10}' in block

    def test_has_study_data(self):
        """Test detection of injectable study data."""
        assert not has_study_data([], [])
        assert has_study_data([StudySession(subject="x", duration_minutes=1)], [])


class TestProfileContext:
    """Tests for build_profile_context()."""

    def test_layout(self):
        """Test that name and bio are serialized under the header."""
        block = build_profile_context(UserProfile(name="Awa", bio="Étudiante en L2"))

        assert block.startswith(PROFILE_HEADER)
        assert "User Name: Awa" in block
        assert "User Bio: Étudiante en L2" in block


class TestWrapUserRequest:
    """Tests for wrap_user_request()."""

    def test_no_blocks(self):
        """Test that text passes through when there is nothing to inject."""
        assert wrap_user_request([], "Bonjour") == "Bonjour"

    def test_blocks_joined(self):
        """Test the separator between blocks and the request."""
        assert wrap_user_request(["A", "B"], "Q") == "A\n\nB\n\nUser Request: Q"


class TestGenerationOptions:
    """Tests for apply_generation_options()."""

    def test_defaults_leave_text_unchanged(self):
        """Test that default options add nothing."""
        assert apply_generation_options("Bonjour", GenerationOptions()) == "Bonjour"
        assert GenerationOptions().is_default

    def test_only_non_default_parts(self):
        """Test that only changed options are appended, in fixed order."""
        options = GenerationOptions(level="Lycée", tone="Socratique")
        assert apply_generation_options("Q", options) == (
            "Q\n\n[INSTRUCTIONS DE GÉNÉRATION: Niveau Cible: Lycée | Ton/Style: Socratique]"
        )

    def test_all_parts(self):
        """Test the full suffix."""
        options = GenerationOptions(level="Expert", response_format="Fiche de révision", tone="Ludique")
        assert apply_generation_options("Q", options).endswith(
            "[INSTRUCTIONS DE GÉNÉRATION: Niveau Cible: Expert | "
            "Format de Réponse: Fiche de révision | Ton/Style: Ludique]"
        )


class TestImprovePrompt:
    """Tests for build_improve_prompt()."""

    def test_fenced_code(self):
        """Test that the code is fenced with its language."""
        assert build_improve_prompt("print(1)", "python") == (
            "Review and improve this python code:\n```python\nprint(1)\n```"
        )
