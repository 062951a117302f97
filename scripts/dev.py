#!/usr/bin/env python3
"""Development task runner for instructkit.

Usage:
    python scripts/dev.py lint          # Check linting
    python scripts/dev.py format        # Auto-format code
    python scripts/dev.py check         # Lint + type check (no auto-fix)
    python scripts/dev.py test          # Run all tests
    python scripts/dev.py bundle        # Validate every bundled example template
    python scripts/dev.py clean         # Remove cache files
    python scripts/dev.py all           # Format + lint + bundle + test
"""

from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
PACKAGES_DIR = ROOT / "packages"
BUNDLE_EXAMPLES = (
    PACKAGES_DIR
    / "providers"
    / "instructkit-fs"
    / "instructkit_fs"
    / "bundled"
    / "copilot-instructions"
    / "examples"
)
SOURCES = ["packages/", "examples/", "scripts/"]
COVERED = [
    "instructkit_core",
    "instructkit_fs",
    "instructkit_http",
    "instructkit_mcp_server",
    "instructkit_cli",
]


def _run(cmd: list[str], *, check: bool = True) -> int:
    """Run a command and return its exit code."""
    print(f"\n{'='*60}")
    print(f"  {' '.join(cmd)}")
    print(f"{'='*60}\n")
    result = subprocess.run(cmd, cwd=ROOT, check=False)
    if check and result.returncode != 0:
        sys.exit(result.returncode)
    return result.returncode


# Use sys.executable -m so tools resolve from the active venv.
_PY = sys.executable


def lint() -> None:
    """Run ruff linter (check only, no fixes)."""
    _run([_PY, "-m", "ruff", "check", *SOURCES])


def fmt() -> None:
    """Auto-format code with ruff and apply safe lint fixes."""
    _run([_PY, "-m", "ruff", "format", *SOURCES])
    _run([_PY, "-m", "ruff", "check", "--fix", *SOURCES])


def typecheck() -> None:
    """Run mypy over the import packages."""
    _run([_PY, "-m", "mypy", *(f"-p={name}" for name in COVERED)], check=False)


def check() -> None:
    """Run format check, lint and type check without modifying files."""
    _run([_PY, "-m", "ruff", "format", "--check", *SOURCES])
    lint()
    typecheck()


def test() -> None:
    """Run the test suite."""
    _run([_PY, "-m", "pytest", "packages/", "-v"])


def test_cov() -> None:
    """Run tests with a coverage report per import package."""
    cov = [f"--cov={name}" for name in COVERED]
    _run([_PY, "-m", "pytest", "packages/", *cov, "--cov-report=term-missing"])


def bundle() -> None:
    """Run ``instructkit validate`` on every bundled example template."""
    failed = []
    for example in sorted(BUNDLE_EXAMPLES.glob("*.md")):
        code = _run([_PY, "-m", "instructkit_cli", "validate", str(example)], check=False)
        if code != 0:
            failed.append(example.name)
    if failed:
        print(f"\n  Failing examples: {', '.join(failed)}")
        sys.exit(1)
    print("\n  All bundled examples pass the checklist.")


def clean() -> None:
    """Remove all cache and build artifacts."""
    patterns = [
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        "*.egg-info",
        "dist",
        "build",
        "htmlcov",
        ".coverage",
    ]
    root_venv = ROOT / ".venv"
    removed = 0
    for pattern in patterns:
        for path in ROOT.rglob(pattern):
            if root_venv in (path, *path.parents):
                continue
            if path.is_dir():
                shutil.rmtree(path)
            elif path.is_file():
                path.unlink()
            else:
                continue
            print(f"  Removed {path.relative_to(ROOT)}")
            removed += 1
    print("  Nothing to clean." if removed == 0 else f"\n  Cleaned {removed} item(s).")


def all_tasks() -> None:
    """Run format + lint + bundle + test."""
    fmt()
    lint()
    bundle()
    test()


TASKS = {
    "lint": lint,
    "format": fmt,
    "fmt": fmt,
    "typecheck": typecheck,
    "check": check,
    "test": test,
    "test:cov": test_cov,
    "bundle": bundle,
    "clean": clean,
    "all": all_tasks,
}


def main() -> None:
    if len(sys.argv) < 2 or sys.argv[1] in ("-h", "--help", "help"):
        print(__doc__)
        print("Available tasks:")
        for name, fn in TASKS.items():
            print(f"  {name:16s} {fn.__doc__ or ''}")
        sys.exit(0)

    task = TASKS.get(sys.argv[1])
    if task is None:
        print(f"Unknown task: {sys.argv[1]}")
        print(f"Available: {', '.join(TASKS.keys())}")
        sys.exit(1)

    task()


if __name__ == "__main__":
    main()
