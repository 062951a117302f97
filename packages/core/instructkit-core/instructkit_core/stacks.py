"""Tech-stack detection for existing projects.

:func:`detect_tech_stack` inspects the marker files at the top of a
project directory (``package.json``, ``pyproject.toml``, ``go.mod``,
``*.csproj`` ...) and reports the stack tags it finds, together with the
commands the project already exposes (``package.json`` scripts and
``Makefile`` targets) and its top-level directories.

Tags are plain lowercase strings (``react``, ``typescript``,
``fastapi``, ``terraform`` ...).  They are the vocabulary used by the
``Keywords`` column of the template lookup table in ``SKILL.md``.

Example::

    report = detect_tech_stack(Path("."))
    print(report.tags)          # ['javascript', 'typescript', 'nextjs']
    print(report.commands)      # {'build': 'pnpm run build', ...}
"""

from __future__ import annotations

import json
import logging
import re
import tomllib
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

_logger = logging.getLogger(__name__)

StackKind = Literal["language", "framework", "tool"]

# npm package name -> framework tag.  Order matters only for evidence text.
_NODE_FRAMEWORKS: tuple[tuple[str, str], ...] = (
    ("next", "nextjs"),
    ("nuxt", "nuxt"),
    ("react-native", "react-native"),
    ("react", "react"),
    ("vue", "vue"),
    ("@angular/core", "angular"),
    ("svelte", "svelte"),
    ("@sveltejs/kit", "svelte"),
    ("@nestjs/core", "nestjs"),
    ("express", "express"),
)

_PYTHON_FRAMEWORKS: dict[str, str] = {
    "django": "django",
    "flask": "flask",
    "fastapi": "fastapi",
}

# A framework that builds on another one replaces it in the report.
_SUPERSEDES: dict[str, tuple[str, ...]] = {
    "nextjs": ("react",),
    "nuxt": ("vue",),
    "react-native": ("react",),
    "nestjs": ("express",),
}

#: Command names picked up from ``package.json`` scripts and ``Makefile`` targets.
COMMAND_NAMES: tuple[str, ...] = (
    "install",
    "dev",
    "start",
    "run",
    "build",
    "test",
    "lint",
    "format",
    "fmt",
    "typecheck",
    "check",
    "clean",
)

_IGNORED_DIRS: frozenset[str] = frozenset(
    {"node_modules", "venv", "__pycache__", "dist", "build", "target", "vendor", "bin", "obj"}
)

_REQUIREMENT_NAME_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")
_MAKE_TARGET_RE = re.compile(r"^([A-Za-z0-9][\w.-]*)\s*:(?!=)", re.MULTILINE)
_GEM_RAILS_RE = re.compile(r"""^\s*gem\s+['"]rails['"]""", re.MULTILINE)


class DetectedStack(BaseModel):
    """A single stack tag found in a project."""

    tag: str = Field(..., description="Stack tag, e.g. 'react' or 'python'")
    kind: StackKind = Field(..., description="Whether the tag names a language, framework or tool")
    evidence: str = Field(..., description="Marker file (and entry) the tag was derived from")


class StackReport(BaseModel):
    """Everything :func:`detect_tech_stack` learned about a project.

    Attributes:
        root: The inspected project directory.
        stacks: Detected stack tags, in detection order, without
            duplicates.
        package_manager: ``npm``, ``pnpm``, ``yarn`` or ``bun`` for
            JavaScript projects, else ``None``.
        commands: Command name (``build``, ``test`` ...) to shell
            command, detected from the project's own scripts.
        top_level_dirs: Non-hidden top-level directories, sorted.
    """

    root: Path
    stacks: list[DetectedStack] = Field(default_factory=list)
    package_manager: str | None = None
    commands: dict[str, str] = Field(default_factory=dict)
    top_level_dirs: list[str] = Field(default_factory=list)

    @property
    def tags(self) -> list[str]:
        """Detected tags in detection order."""
        return [s.tag for s in self.stacks]

    def has(self, tag: str) -> bool:
        """Return ``True`` if *tag* was detected."""
        return tag in self.tags

    def summary(self) -> str:
        """Return a one-line human-readable summary of the detected stack."""
        frameworks = [s.tag for s in self.stacks if s.kind == "framework"]
        languages = [s.tag for s in self.stacks if s.kind == "language"]
        tools = [s.tag for s in self.stacks if s.kind == "tool"]
        parts = []
        if frameworks:
            parts.append("frameworks: " + ", ".join(frameworks))
        if languages:
            parts.append("languages: " + ", ".join(languages))
        if tools:
            parts.append("tools: " + ", ".join(tools))
        return "; ".join(parts) if parts else "no known stack detected"


def detect_tech_stack(project_root: Path) -> StackReport:
    """Detect the tech stack of the project at *project_root*.

    Only marker files are read; nothing is executed.  Manifests that
    cannot be parsed are logged and skipped so that one broken file
    does not hide the rest of the stack.

    Args:
        project_root: Directory of the project to inspect.

    Returns:
        A :class:`StackReport`.

    Raises:
        NotADirectoryError: If *project_root* is not a directory.
    """
    root = Path(project_root)
    if not root.is_dir():
        raise NotADirectoryError(f"Project root does not exist: {root}")

    detector = _Detector(root)
    detector.detect_make()
    detector.detect_node()
    detector.detect_python()
    detector.detect_go()
    detector.detect_rust()
    detector.detect_jvm()
    detector.detect_dotnet()
    detector.detect_ruby()
    detector.detect_php()
    detector.detect_dart()
    detector.detect_swift()
    detector.detect_elixir()
    detector.detect_terraform()
    detector.detect_docker()
    return detector.report()


class _Detector:
    """Accumulates stack tags and commands while scanning one project."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._stacks: dict[str, DetectedStack] = {}
        self._commands: dict[str, str] = {}
        self._package_manager: str | None = None

    def add(self, tag: str, kind: StackKind, evidence: str) -> None:
        if tag not in self._stacks:
            self._stacks[tag] = DetectedStack(tag=tag, kind=kind, evidence=evidence)

    def report(self) -> StackReport:
        superseded = {
            old for new, olds in _SUPERSEDES.items() if new in self._stacks for old in olds
        }
        stacks = [s for tag, s in self._stacks.items() if tag not in superseded]
        return StackReport(
            root=self._root,
            stacks=stacks,
            package_manager=self._package_manager,
            commands=self._commands,
            top_level_dirs=_top_level_dirs(self._root),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read_text(self, name: str) -> str | None:
        path = self._root / name
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            _logger.warning("Cannot read %s: %s", path, exc)
            return None

    def _glob(self, pattern: str) -> list[Path]:
        """Match *pattern* at the root and one directory below it."""
        matches = list(self._root.glob(pattern)) + list(self._root.glob(f"*/{pattern}"))
        return sorted(p for p in matches if not _is_ignored(p.relative_to(self._root)))

    # ------------------------------------------------------------------
    # Ecosystems
    # ------------------------------------------------------------------

    def detect_make(self) -> None:
        text = self._read_text("Makefile")
        if text is None:
            return
        for target in _MAKE_TARGET_RE.findall(text):
            if target in COMMAND_NAMES:
                self._commands.setdefault(target, f"make {target}")

    def detect_node(self) -> None:
        text = self._read_text("package.json")
        if text is None:
            return
        try:
            manifest = json.loads(text)
        except json.JSONDecodeError as exc:
            _logger.warning("Skipping unparseable package.json: %s", exc)
            return
        if not isinstance(manifest, dict):
            _logger.warning("Skipping package.json: top level is not an object")
            return

        self.add("javascript", "language", "package.json")
        deps: dict[str, Any] = {}
        for key in ("dependencies", "devDependencies", "peerDependencies"):
            section = manifest.get(key)
            if isinstance(section, dict):
                deps.update(section)

        if "typescript" in deps:
            self.add("typescript", "language", "package.json devDependencies: typescript")
        elif (self._root / "tsconfig.json").is_file():
            self.add("typescript", "language", "tsconfig.json")

        for package, tag in _NODE_FRAMEWORKS:
            if package in deps:
                self.add(tag, "framework", f"package.json dependency: {package}")

        pm = _node_package_manager(self._root)
        self._package_manager = pm
        self._commands.setdefault("install", f"{pm} install")
        scripts = manifest.get("scripts")
        if isinstance(scripts, dict):
            for name in scripts:
                if name in COMMAND_NAMES:
                    runner = f"yarn {name}" if pm == "yarn" else f"{pm} run {name}"
                    self._commands.setdefault(name, runner)

    def detect_python(self) -> None:
        deps: set[str] = set()
        evidence: str | None = None

        pyproject = self._read_text("pyproject.toml")
        if pyproject is not None:
            evidence = "pyproject.toml"
            try:
                deps |= _pyproject_dependencies(tomllib.loads(pyproject))
            except tomllib.TOMLDecodeError as exc:
                _logger.warning("Skipping unparseable pyproject.toml: %s", exc)

        for path in sorted(self._root.glob("requirements*.txt")):
            text = self._read_text(path.name)
            if text is None:
                continue
            evidence = evidence or path.name
            deps |= _requirement_names(text.splitlines())

        pipfile = self._read_text("Pipfile")
        if pipfile is not None:
            evidence = evidence or "Pipfile"
            try:
                data = tomllib.loads(pipfile)
            except tomllib.TOMLDecodeError as exc:
                _logger.warning("Skipping unparseable Pipfile: %s", exc)
            else:
                for key in ("packages", "dev-packages"):
                    deps |= {_normalize(name) for name in data.get(key, {})}

        setup_py = self._read_text("setup.py")
        if setup_py is not None:
            evidence = evidence or "setup.py"
            deps |= {name for name in _PYTHON_FRAMEWORKS if name in setup_py.lower()}

        if evidence is None:
            return
        self.add("python", "language", evidence)
        for package, tag in _PYTHON_FRAMEWORKS.items():
            if package in deps:
                self.add(tag, "framework", f"{evidence} dependency: {package}")

    def detect_go(self) -> None:
        if (self._root / "go.mod").is_file():
            self.add("go", "language", "go.mod")
            self._commands.setdefault("build", "go build ./...")
            self._commands.setdefault("test", "go test ./...")

    def detect_rust(self) -> None:
        if (self._root / "Cargo.toml").is_file():
            self.add("rust", "language", "Cargo.toml")
            self._commands.setdefault("build", "cargo build")
            self._commands.setdefault("test", "cargo test")

    def detect_jvm(self) -> None:
        pom = self._read_text("pom.xml")
        if pom is not None:
            self.add("java", "language", "pom.xml")
            if "spring-boot" in pom:
                self.add("spring-boot", "framework", "pom.xml: spring-boot")

        for name in ("build.gradle.kts", "build.gradle"):
            gradle = self._read_text(name)
            if gradle is None:
                continue
            kotlin_sources = (self._root / "src" / "main" / "kotlin").is_dir()
            if "org.jetbrains.kotlin" in gradle or 'kotlin("' in gradle or kotlin_sources:
                self.add("kotlin", "language", name)
            else:
                self.add("java", "language", name)
            if "org.springframework.boot" in gradle or "spring-boot" in gradle:
                self.add("spring-boot", "framework", f"{name}: spring-boot")

    def detect_dotnet(self) -> None:
        projects = self._glob("*.csproj")
        solutions = self._glob("*.sln")
        if not projects and not solutions:
            return
        first = (projects or solutions)[0]
        self.add("csharp", "language", str(first.relative_to(self._root)))
        for path in projects:
            text = self._read_text(str(path.relative_to(self._root)))
            if text is None:
                continue
            if "Microsoft.NET.Sdk.Web" in text or "Microsoft.AspNetCore" in text:
                self.add("aspnet", "framework", str(path.relative_to(self._root)))
                break

    def detect_ruby(self) -> None:
        gemfile = self._read_text("Gemfile")
        if gemfile is None:
            return
        self.add("ruby", "language", "Gemfile")
        if _GEM_RAILS_RE.search(gemfile):
            self.add("rails", "framework", "Gemfile gem: rails")

    def detect_php(self) -> None:
        text = self._read_text("composer.json")
        if text is None:
            return
        self.add("php", "language", "composer.json")
        try:
            manifest = json.loads(text)
        except json.JSONDecodeError as exc:
            _logger.warning("Skipping unparseable composer.json: %s", exc)
            return
        require = manifest.get("require", {}) if isinstance(manifest, dict) else {}
        if isinstance(require, dict) and "laravel/framework" in require:
            self.add("laravel", "framework", "composer.json require: laravel/framework")

    def detect_dart(self) -> None:
        text = self._read_text("pubspec.yaml")
        if text is None:
            return
        self.add("dart", "language", "pubspec.yaml")
        try:
            pubspec = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            _logger.warning("Skipping unparseable pubspec.yaml: %s", exc)
            return
        deps = pubspec.get("dependencies") if isinstance(pubspec, dict) else None
        if isinstance(deps, dict) and "flutter" in deps:
            self.add("flutter", "framework", "pubspec.yaml dependency: flutter")

    def detect_swift(self) -> None:
        if (self._root / "Package.swift").is_file():
            self.add("swift", "language", "Package.swift")
        elif any(p.is_dir() for p in self._root.glob("*.xcodeproj")):
            self.add("swift", "language", "*.xcodeproj")

    def detect_elixir(self) -> None:
        mix = self._read_text("mix.exs")
        if mix is None:
            return
        self.add("elixir", "language", "mix.exs")
        if ":phoenix" in mix:
            self.add("phoenix", "framework", "mix.exs dependency: phoenix")

    def detect_terraform(self) -> None:
        modules = self._glob("*.tf")
        if modules:
            self.add("terraform", "tool", str(modules[0].relative_to(self._root)))

    def detect_docker(self) -> None:
        for name in ("Dockerfile", "docker-compose.yml", "docker-compose.yaml", "compose.yaml"):
            if (self._root / name).is_file():
                self.add("docker", "tool", name)
                return


# ------------------------------------------------------------------
# Module helpers
# ------------------------------------------------------------------


def _node_package_manager(root: Path) -> str:
    if (root / "pnpm-lock.yaml").is_file():
        return "pnpm"
    if (root / "yarn.lock").is_file():
        return "yarn"
    if (root / "bun.lockb").is_file() or (root / "bun.lock").is_file():
        return "bun"
    return "npm"


def _normalize(name: str) -> str:
    return name.strip().lower().replace("_", "-")


def _requirement_names(lines: list[str]) -> set[str]:
    names: set[str] = set()
    for line in lines:
        if line.lstrip().startswith(("#", "-")):
            continue
        match = _REQUIREMENT_NAME_RE.match(line)
        if match:
            names.add(_normalize(match.group(1)))
    return names


def _pyproject_dependencies(data: dict[str, Any]) -> set[str]:
    """Collect dependency names from PEP 621 and Poetry tables."""
    project = data.get("project", {})
    requirements: list[str] = list(project.get("dependencies", []))
    for extra in project.get("optional-dependencies", {}).values():
        requirements.extend(extra)
    names = _requirement_names(requirements)

    poetry = data.get("tool", {}).get("poetry", {})
    names |= {_normalize(name) for name in poetry.get("dependencies", {})}
    for group in poetry.get("group", {}).values():
        names |= {_normalize(name) for name in group.get("dependencies", {})}
    return names


def _is_ignored(relative: Path) -> bool:
    return any(part in _IGNORED_DIRS or part.startswith(".") for part in relative.parts[:-1])


def _top_level_dirs(root: Path) -> list[str]:
    return sorted(
        p.name
        for p in root.iterdir()
        if p.is_dir() and not p.name.startswith(".") and p.name not in _IGNORED_DIRS
    )
