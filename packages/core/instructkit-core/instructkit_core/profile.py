"""Project specifics gathered by interviewing the user.

The example templates describe a stack in general terms.  A
:class:`ProjectProfile` carries what only the user knows -- the project
name, a short description, the real build and test commands, and house
rules -- and :func:`interview_questions` lists what is still missing
after tech-stack detection.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from instructkit_core.stacks import StackReport

#: Commands the interview asks for when detection did not find them.
INTERVIEW_COMMANDS: tuple[str, ...] = ("build", "test", "lint")


class ProjectProfile(BaseModel):
    """Project-specific facts merged into an example template.

    Attributes:
        name: Project name used in the instructions title.
        description: One or two sentences describing the project.
        commands: Command name (``build``, ``test`` ...) to shell command.
            Takes precedence over detected commands.
        structure: Directory (relative path) to a short description of
            its role.
        guidelines: Extra project conventions appended to the
            ``Guidelines`` section.
    """

    name: str | None = None
    description: str | None = None
    commands: dict[str, str] = Field(default_factory=dict)
    structure: dict[str, str] = Field(default_factory=dict)
    guidelines: list[str] = Field(default_factory=list)


class InterviewQuestion(BaseModel):
    """A question to ask the user, keyed by the profile field it fills."""

    field: str
    prompt: str
    default: str | None = None


def interview_questions(
    profile: ProjectProfile,
    report: StackReport | None = None,
) -> list[InterviewQuestion]:
    """Return the questions still needed to complete *profile*.

    Fields already set on the profile are never asked again.  Commands
    found by tech-stack detection are not asked either.

    Args:
        profile: What is known so far.
        report: Optional detection result used for defaults and to skip
            commands the project already declares.

    Returns:
        Questions in asking order.  Each ``field`` is ``name``,
        ``description``, ``commands.<name>`` or ``guidelines``.
    """
    questions: list[InterviewQuestion] = []
    detected = report.commands if report is not None else {}

    if not profile.name:
        questions.append(
            InterviewQuestion(
                field="name",
                prompt="What is the project's name?",
                default=report.root.resolve().name if report is not None else None,
            )
        )
    if not profile.description:
        questions.append(
            InterviewQuestion(
                field="description",
                prompt="Describe the project in one or two sentences.",
            )
        )
    for command in INTERVIEW_COMMANDS:
        if command in profile.commands or command in detected:
            continue
        questions.append(
            InterviewQuestion(
                field=f"commands.{command}",
                prompt=f"Which command runs the {command} step? (leave empty to skip)",
            )
        )
    if not profile.guidelines:
        questions.append(
            InterviewQuestion(
                field="guidelines",
                prompt=(
                    "Any project-specific conventions Copilot should follow? "
                    "(separate several with ';', leave empty to skip)"
                ),
            )
        )
    return questions


def apply_answers(profile: ProjectProfile, answers: dict[str, str]) -> ProjectProfile:
    """Return a copy of *profile* with interview *answers* applied.

    Blank answers are ignored.  Unknown fields raise :class:`ValueError`.
    """
    update: dict[str, object] = {}
    commands = dict(profile.commands)
    guidelines = list(profile.guidelines)

    for field, answer in answers.items():
        value = answer.strip()
        if not value:
            continue
        if field in ("name", "description"):
            update[field] = value
        elif field.startswith("commands."):
            commands[field.removeprefix("commands.")] = value
        elif field == "guidelines":
            guidelines.extend(part.strip() for part in value.split(";") if part.strip())
        else:
            raise ValueError(f"Unknown profile field {field!r}")

    update["commands"] = commands
    update["guidelines"] = guidelines
    return profile.model_copy(update=update)
