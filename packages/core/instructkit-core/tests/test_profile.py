"""Tests for the project profile interview."""

import pytest

from instructkit_core import ProjectProfile, StackReport, apply_answers, interview_questions


class TestInterviewQuestions:
    def test_empty_profile_asks_everything(self):
        fields = [q.field for q in interview_questions(ProjectProfile())]
        assert fields == [
            "name",
            "description",
            "commands.build",
            "commands.test",
            "commands.lint",
            "guidelines",
        ]

    def test_known_fields_are_skipped(self):
        profile = ProjectProfile(
            name="Acme",
            description="Billing.",
            commands={"lint": "ruff check ."},
            guidelines=["Be nice."],
        )
        fields = [q.field for q in interview_questions(profile)]
        assert fields == ["commands.build", "commands.test"]

    def test_detected_commands_are_skipped(self, tmp_path):
        report = StackReport(root=tmp_path, commands={"build": "make", "test": "make test"})
        fields = [q.field for q in interview_questions(ProjectProfile(), report)]
        assert "commands.build" not in fields
        assert "commands.test" not in fields
        assert "commands.lint" in fields

    def test_name_defaults_to_directory(self, tmp_path):
        root = tmp_path / "billing-api"
        root.mkdir()
        questions = interview_questions(ProjectProfile(), StackReport(root=root))
        assert questions[0].field == "name"
        assert questions[0].default == "billing-api"

    def test_no_default_without_report(self):
        assert interview_questions(ProjectProfile())[0].default is None


class TestApplyAnswers:
    def test_applies_all_fields(self):
        profile = apply_answers(
            ProjectProfile(commands={"build": "make"}),
            {
                "name": " Acme ",
                "description": "Billing API.",
                "commands.test": "make test",
                "guidelines": "Use UTC; Wrap errors ;",
            },
        )
        assert profile.name == "Acme"
        assert profile.description == "Billing API."
        assert profile.commands == {"build": "make", "test": "make test"}
        assert profile.guidelines == ["Use UTC", "Wrap errors"]

    def test_blank_answers_ignored(self):
        profile = apply_answers(ProjectProfile(name="Acme"), {"name": "  ", "commands.lint": ""})
        assert profile.name == "Acme"
        assert profile.commands == {}

    def test_original_is_not_modified(self):
        original = ProjectProfile(guidelines=["One"])
        apply_answers(original, {"guidelines": "Two"})
        assert original.guidelines == ["One"]

    def test_unknown_field(self):
        with pytest.raises(ValueError, match="Unknown profile field"):
            apply_answers(ProjectProfile(), {"colour": "blue"})
