"""Tests for the SkillProvider abstract base class."""

import pytest

from instructkit_core import SkillProvider


class _Complete(SkillProvider):
    async def get_metadata(self, skill_id):
        return {"name": skill_id}

    async def get_body(self, skill_id):
        return "body"

    async def get_reference(self, skill_id, name):
        return b"ref"

    async def get_example(self, skill_id, name):
        return b"example"

    async def get_agent(self, agent_id):
        return "---\nname: a\n---\n"


class TestSkillProviderABC:
    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            SkillProvider()

    def test_missing_method_cannot_instantiate(self):
        class _NoAgent(SkillProvider):
            async def get_metadata(self, skill_id):
                return {}

            async def get_body(self, skill_id):
                return ""

            async def get_reference(self, skill_id, name):
                return b""

            async def get_example(self, skill_id, name):
                return b""

        with pytest.raises(TypeError):
            _NoAgent()

    async def test_complete_subclass(self):
        provider = _Complete()
        assert await provider.get_metadata("x") == {"name": "x"}
        assert await provider.get_example("x", "go.md") == b"example"
