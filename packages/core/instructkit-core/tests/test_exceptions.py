"""Tests for the exception hierarchy."""

import pytest

from instructkit_core import (
    AgentNotFoundError,
    InstructionsFileError,
    InstructKitError,
    ResourceNotFoundError,
    SkillNotFoundError,
    TemplateNotFoundError,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc_type",
        [
            SkillNotFoundError,
            ResourceNotFoundError,
            TemplateNotFoundError,
            AgentNotFoundError,
            InstructionsFileError,
        ],
    )
    def test_is_instructkit_error(self, exc_type):
        assert issubclass(exc_type, InstructKitError)

    @pytest.mark.parametrize(
        "exc_type",
        [SkillNotFoundError, ResourceNotFoundError, TemplateNotFoundError, AgentNotFoundError],
    )
    def test_lookup_failures_are_lookup_errors(self, exc_type):
        assert issubclass(exc_type, LookupError)

    def test_instructions_file_error_is_not_lookup_error(self):
        assert not issubclass(InstructionsFileError, LookupError)

    def test_template_not_found_is_resource_not_found(self):
        with pytest.raises(ResourceNotFoundError):
            raise TemplateNotFoundError("go.md")

    def test_message_preserved(self):
        err = SkillNotFoundError("my-skill")
        assert str(err) == "my-skill"

    def test_catch_lookup_error_catches_agent_not_found(self):
        with pytest.raises(LookupError):
            raise AgentNotFoundError("generator")
