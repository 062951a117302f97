"""Generate copilot instructions from Python, without the CLI.

This script shows the library flow behind ``instructkit generate``.

Flow:
    1. Register the bundled skill (or a team bundle served over HTTP)
    2. Detect the tech stack of a project
    3. Render the matching template with project specifics
    4. Write or merge ``.github/copilot-instructions.md``

Requirements:
    pip install instructkit

Usage:
    python examples/library/generate.py path/to/project
    INSTRUCTKIT_SKILLS_URL=https://example.com/skills python examples/library/generate.py .
"""

import asyncio
import os
import sys
from pathlib import Path

from instructkit_core import InstructionsGenerator, ProjectProfile, SkillRegistry
from instructkit_fs import BUNDLED_SKILL_ID, BUNDLED_SKILLS_ROOT, LocalFileSystemSkillProvider
from instructkit_http import HTTPStaticFileSkillProvider


async def main(project: Path) -> None:
    # ------------------------------------------------------------------
    # 1. Set up the skill provider and registry
    # ------------------------------------------------------------------
    url = os.environ.get("INSTRUCTKIT_SKILLS_URL")
    if url:
        provider = HTTPStaticFileSkillProvider(url)
    else:
        provider = LocalFileSystemSkillProvider(BUNDLED_SKILLS_ROOT)
    registry = SkillRegistry()
    await registry.register(BUNDLED_SKILL_ID, provider)
    generator = InstructionsGenerator(registry.get_skill(BUNDLED_SKILL_ID))

    # ------------------------------------------------------------------
    # 2. Detect and generate
    # ------------------------------------------------------------------
    report = generator.detect(project)
    print(f"=== Detected: {report.summary()} ===")

    profile = ProjectProfile(name=project.resolve().name)
    result = await generator.generate(project, profile, report=report)
    print(f"Template: {result.template.stack} ({result.template.filename})")

    # ------------------------------------------------------------------
    # 3. Write (or merge) and show the checklist
    # ------------------------------------------------------------------
    written, checklist = await generator.write(project, result)
    print(f"{written.action}: {written.path}")
    print()
    print(checklist.to_markdown())

    if isinstance(provider, HTTPStaticFileSkillProvider):
        await provider.aclose()


if __name__ == "__main__":
    asyncio.run(main(Path(sys.argv[1] if len(sys.argv) > 1 else ".")))
