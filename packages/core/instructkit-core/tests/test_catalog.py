"""Tests for SkillRegistry.get_skills_catalog."""

from unittest.mock import AsyncMock

import pytest

from instructkit_core import SkillProvider, SkillRegistry


def _mock_provider(skill_id: str, description: str) -> AsyncMock:
    provider = AsyncMock(spec=SkillProvider)
    provider.get_metadata.return_value = {"name": skill_id, "description": description}
    provider.get_body.return_value = "# Body"
    return provider


async def _registry() -> SkillRegistry:
    registry = SkillRegistry()
    await registry.register(
        "copilot-instructions",
        _mock_provider("copilot-instructions", "Creates <files> & more."),
    )
    await registry.register("team-conventions", _mock_provider("team-conventions", "House rules."))
    return registry


class TestXmlCatalog:
    async def test_empty(self):
        assert await SkillRegistry().get_skills_catalog() == "<available_skills />"

    async def test_lists_skills_sorted(self):
        xml = await (await _registry()).get_skills_catalog(format="xml")
        assert xml.startswith("<available_skills>")
        assert xml.index("copilot-instructions") < xml.index("team-conventions")
        assert "<name>team-conventions</name>" in xml

    async def test_escapes_text(self):
        xml = await (await _registry()).get_skills_catalog()
        assert "Creates &lt;files&gt; &amp; more." in xml


class TestMarkdownCatalog:
    async def test_empty(self):
        result = await SkillRegistry().get_skills_catalog(format="markdown")
        assert result == "No skills are currently available."

    async def test_lists_skills(self):
        md = await (await _registry()).get_skills_catalog(format="markdown")
        assert md.startswith("# Available Skills")
        assert "## copilot-instructions" in md
        assert "- **Description**: House rules." in md


async def test_unknown_format():
    with pytest.raises(ValueError, match="Unsupported format"):
        await SkillRegistry().get_skills_catalog(format="json")
