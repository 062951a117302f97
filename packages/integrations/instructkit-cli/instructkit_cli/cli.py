"""Command-line interface for creating copilot instructions.

Usage::

    instructkit detect .
    instructkit templates
    instructkit generate . --name Acme --no-input
    instructkit validate .github/copilot-instructions.md
    instructkit agent

The skill bundle is the one shipped with :mod:`instructkit_fs` unless
``--skills-root`` (or ``INSTRUCTKIT_SKILLS_ROOT``) points at another
directory or ``--skills-url`` (or ``INSTRUCTKIT_SKILLS_URL``) at a static
HTTP host.

Exit codes: ``0`` success, ``1`` checklist failures, ``2`` usage or
lookup errors.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from instructkit_core import (
    ChecklistReport,
    InstructionsGenerator,
    InstructKitError,
    ProjectProfile,
    SkillProvider,
    SkillRegistry,
    StackReport,
    apply_answers,
    detect_tech_stack,
    interview_questions,
)
from instructkit_fs import (
    BUNDLED_AGENT_ID,
    BUNDLED_SKILL_ID,
    BUNDLED_SKILLS_ROOT,
    LocalFileSystemSkillProvider,
)
from instructkit_http import HTTPStaticFileSkillProvider

_logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CHECKLIST_FAILED = 1
EXIT_ERROR = 2

SKILLS_ROOT_ENV = "INSTRUCTKIT_SKILLS_ROOT"
SKILLS_URL_ENV = "INSTRUCTKIT_SKILLS_URL"


def build_parser() -> argparse.ArgumentParser:
    """Return the ``instructkit`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="instructkit",
        description="Create and check .github/copilot-instructions.md files.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--skills-root",
        type=Path,
        default=os.environ.get(SKILLS_ROOT_ENV) or None,
        help=f"Directory holding the skill bundle (env: {SKILLS_ROOT_ENV}).",
    )
    source.add_argument(
        "--skills-url",
        default=os.environ.get(SKILLS_URL_ENV) or None,
        help=f"Static HTTP host serving the skill bundle (env: {SKILLS_URL_ENV}).",
    )
    parser.add_argument(
        "--skill",
        default=BUNDLED_SKILL_ID,
        help=f"Skill that provides templates and checklist (default: {BUNDLED_SKILL_ID}).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    sub = parser.add_subparsers(dest="command", required=True)

    detect = sub.add_parser("detect", help="Show the detected tech stack of a project.")
    detect.add_argument("project", nargs="?", type=Path, default=Path("."))
    detect.add_argument("--json", action="store_true", help="Print the report as JSON.")

    sub.add_parser("templates", help="Show the stack-to-template lookup table.")

    generate = sub.add_parser("generate", help="Generate or update copilot instructions.")
    generate.add_argument("project", nargs="?", type=Path, default=Path("."))
    generate.add_argument("--template", help="Template to use instead of stack selection.")
    generate.add_argument(
        "--output",
        help="Target file or directory (default: .github/copilot-instructions.md).",
    )
    generate.add_argument("--name", help="Project name.")
    generate.add_argument("--description", help="One or two sentences about the project.")
    generate.add_argument(
        "--command",
        dest="commands",
        action="append",
        default=[],
        metavar="NAME=CMD",
        help="Project command, e.g. test='make test'. Repeatable.",
    )
    generate.add_argument(
        "--guideline",
        dest="guidelines",
        action="append",
        default=[],
        help="Project convention to add. Repeatable.",
    )
    generate.add_argument(
        "--update-section",
        dest="update_sections",
        action="append",
        default=[],
        metavar="HEADING",
        help="Existing section to replace with the generated one. Repeatable.",
    )
    generate.add_argument("--no-input", action="store_true", help="Never ask questions.")
    generate.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the resulting file instead of writing it.",
    )

    validate = sub.add_parser("validate", help="Check a file against the validation checklist.")
    validate.add_argument("file", type=Path)

    agent = sub.add_parser("agent", help="Show the generator agent persona.")
    agent.add_argument("agent_id", nargs="?", default=BUNDLED_AGENT_ID)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``instructkit`` console script."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        return asyncio.run(_run(args))
    except (InstructKitError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR


async def _run(args: argparse.Namespace) -> int:
    if args.command == "detect":
        return _cmd_detect(args)

    provider = _make_provider(args)
    try:
        registry = SkillRegistry()
        await registry.register(args.skill, provider)
        generator = InstructionsGenerator(registry.get_skill(args.skill))
        if args.command == "templates":
            return await _cmd_templates(generator)
        if args.command == "generate":
            return await _cmd_generate(args, generator)
        if args.command == "validate":
            return await _cmd_validate(args, generator)
        return await _cmd_agent(args, registry, provider)
    finally:
        if isinstance(provider, HTTPStaticFileSkillProvider):
            await provider.aclose()


def _make_provider(args: argparse.Namespace) -> SkillProvider:
    if args.skills_url:
        return HTTPStaticFileSkillProvider(args.skills_url)
    root = Path(args.skills_root) if args.skills_root else BUNDLED_SKILLS_ROOT
    _logger.debug("Using skill bundle at %s", root)
    return LocalFileSystemSkillProvider(root)


# ------------------------------------------------------------------
# Subcommands
# ------------------------------------------------------------------


def _cmd_detect(args: argparse.Namespace) -> int:
    report = detect_tech_stack(args.project)
    if args.json:
        print(report.model_dump_json(indent=2))
        return EXIT_OK

    print(report.summary())
    for stack in report.stacks:
        print(f"  {stack.tag:<16} {stack.kind:<10} {stack.evidence}")
    if report.commands:
        print("Commands:")
        for name, command in report.commands.items():
            print(f"  {name:<16} {command}")
    return EXIT_OK


async def _cmd_templates(generator: InstructionsGenerator) -> int:
    table = await generator.skill.get_template_table()
    print(table.to_markdown())
    return EXIT_OK


async def _cmd_generate(args: argparse.Namespace, generator: InstructionsGenerator) -> int:
    report = generator.detect(args.project)
    profile = ProjectProfile(
        name=args.name,
        description=args.description,
        commands=_parse_commands(args.commands),
        guidelines=args.guidelines,
    )
    if not args.no_input and sys.stdin.isatty():
        profile = interview(profile, report)

    result = await generator.generate(
        args.project,
        profile,
        template=args.template,
        report=report,
    )
    written, checklist = await generator.write(
        args.project,
        result,
        path=args.output,
        update_sections=args.update_sections,
        dry_run=args.dry_run,
    )

    if args.dry_run:
        print(written.content, end="")
    else:
        print(f"{written.action}: {written.path} (template {result.template.filename})")
        for heading in written.added_sections:
            print(f"  + {heading}")
        for heading in written.updated_sections:
            print(f"  ~ {heading}")
    return _print_checklist(checklist, stream=sys.stderr if args.dry_run else sys.stdout)


async def _cmd_validate(args: argparse.Namespace, generator: InstructionsGenerator) -> int:
    content = args.file.read_text(encoding="utf-8")
    return _print_checklist(await generator.validate(content))


async def _cmd_agent(
    args: argparse.Namespace,
    registry: SkillRegistry,
    provider: SkillProvider,
) -> int:
    agent = await registry.register_agent(args.agent_id, provider)
    print(f"{agent.name}: {agent.description}")
    if agent.tools:
        print(f"Tools: {', '.join(agent.tools)}")
    print(f"Skills: {', '.join(agent.skill_links)}")
    print()
    print(agent.body.strip())
    return EXIT_OK


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def interview(
    profile: ProjectProfile,
    report: StackReport | None = None,
    ask: Callable[[str], str] = input,
) -> ProjectProfile:
    """Ask the open interview questions and return the completed profile."""
    answers: dict[str, str] = {}
    for question in interview_questions(profile, report):
        prompt = question.prompt
        if question.default:
            prompt += f" [{question.default}]"
        answer = ask(f"{prompt} ").strip()
        answers[question.field] = answer or (question.default or "")
    return apply_answers(profile, answers)


def _parse_commands(pairs: list[str]) -> dict[str, str]:
    commands: dict[str, str] = {}
    for pair in pairs:
        name, sep, command = pair.partition("=")
        if not sep or not name.strip() or not command.strip():
            raise ValueError(f"Invalid --command {pair!r}; expected NAME=CMD")
        commands[name.strip()] = command.strip()
    return commands


def _print_checklist(checklist: ChecklistReport, stream: TextIO | None = None) -> int:
    print(checklist.to_markdown(), file=stream or sys.stdout)
    if checklist.passed:
        return EXIT_OK
    print(f"{len(checklist.failures)} checklist item(s) failed", file=sys.stderr)
    return EXIT_CHECKLIST_FAILED
