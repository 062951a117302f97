"""Tests for writing and merging copilot instructions files."""

from pathlib import Path

import pytest

from instructkit_core import (
    InstructionsFileError,
    merge_instructions,
    resolve_target_path,
    write_instructions,
)

_EXISTING = """\
# Team Notes

Hand-written intro.

## Guidelines

- Our own rule.

## Deployment

Ask in the release channel.
"""

_GENERATED = """\
# Copilot Instructions for Acme

Generated intro.

## Commands

```bash
# test
make test
```

## Guidelines

- Generated rule.
"""


class TestResolveTargetPath:
    def test_default(self, tmp_path):
        assert resolve_target_path(tmp_path) == tmp_path / ".github" / "copilot-instructions.md"

    def test_directory_gets_convention_appended(self, tmp_path):
        expected = tmp_path / "service" / ".github" / "copilot-instructions.md"
        assert resolve_target_path(tmp_path, "service") == expected

    def test_full_path_used_as_is(self, tmp_path):
        target = tmp_path / "x" / ".github" / "copilot-instructions.md"
        assert resolve_target_path(Path("elsewhere"), target) == target

    def test_relative_full_path(self, tmp_path):
        result = resolve_target_path(tmp_path, ".github/copilot-instructions.md")
        assert result == tmp_path / ".github" / "copilot-instructions.md"


class TestMergeInstructions:
    def test_keeps_existing_and_adds_missing(self):
        result = merge_instructions(_EXISTING, _GENERATED)
        assert result.added_sections == ["Commands"]
        assert result.updated_sections == []
        assert result.content == (
            "# Team Notes\n\nHand-written intro.\n\n"
            "## Guidelines\n\n- Our own rule.\n\n"
            "## Deployment\n\nAsk in the release channel.\n\n"
            "## Commands\n\n```bash\n# test\nmake test\n```\n"
        )

    def test_update_named_section(self):
        result = merge_instructions(_EXISTING, _GENERATED, update_sections=["guidelines"])
        assert result.updated_sections == ["Guidelines"]
        assert "- Generated rule." in result.content
        assert "- Our own rule." not in result.content
        assert "Ask in the release channel." in result.content

    def test_update_identical_section_is_not_reported(self):
        result = merge_instructions(_GENERATED, _GENERATED, update_sections=["Guidelines"])
        assert result.updated_sections == []
        assert result.added_sections == []

    def test_generated_preamble_used_when_existing_has_none(self):
        result = merge_instructions("## Deployment\n\nManual.\n", _GENERATED)
        assert result.content.startswith("# Copilot Instructions for Acme\n\nGenerated intro.\n")


class TestWriteInstructions:
    def test_creates_file_and_parents(self, tmp_path):
        target = tmp_path / ".github" / "copilot-instructions.md"
        result = write_instructions(target, _GENERATED.rstrip("\n"))
        assert result.action == "created"
        assert target.read_text(encoding="utf-8") == _GENERATED

    def test_merges_existing(self, tmp_path):
        target = tmp_path / "copilot-instructions.md"
        target.write_text(_EXISTING, encoding="utf-8")
        result = write_instructions(target, _GENERATED)
        assert result.action == "merged"
        assert result.added_sections == ["Commands"]
        content = target.read_text(encoding="utf-8")
        assert content == result.content
        assert content.startswith("# Team Notes")

    def test_unchanged(self, tmp_path):
        target = tmp_path / "copilot-instructions.md"
        target.write_text(_EXISTING + "\n\n", encoding="utf-8")
        result = write_instructions(target, "## Guidelines\n\n- Other.\n")
        assert result.action == "unchanged"
        assert target.read_text(encoding="utf-8") == _EXISTING + "\n\n"

    def test_dry_run_writes_nothing(self, tmp_path):
        target = tmp_path / ".github" / "copilot-instructions.md"
        result = write_instructions(target, _GENERATED, dry_run=True)
        assert result.action == "created"
        assert result.content == _GENERATED
        assert not target.exists()

    def test_dry_run_merge(self, tmp_path):
        target = tmp_path / "copilot-instructions.md"
        target.write_text(_EXISTING, encoding="utf-8")
        result = write_instructions(target, _GENERATED, dry_run=True)
        assert result.action == "merged"
        assert target.read_text(encoding="utf-8") == _EXISTING

    def test_directory_target_rejected(self, tmp_path):
        with pytest.raises(InstructionsFileError, match="directory"):
            write_instructions(tmp_path, _GENERATED)

    def test_undecodable_existing_file(self, tmp_path):
        target = tmp_path / "copilot-instructions.md"
        target.write_bytes(b"\xff\xfe\x00bad")
        with pytest.raises(InstructionsFileError, match="Cannot read"):
            write_instructions(target, _GENERATED)
