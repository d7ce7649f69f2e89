"""Nox sessions for TopBarBeats development tasks."""

from __future__ import annotations

from pathlib import Path

import nox

ROOT = Path(__file__).parent
PACKAGE = "topbar_beats"

nox.options.error_on_missing_interpreters = False
nox.options.sessions = ["lint", "typecheck", "tests"]


@nox.session
def lint(session: nox.Session) -> None:
    """Run ruff linting and formatting checks."""
    session.install("ruff")
    session.run("ruff", "check", ".")
    session.run("ruff", "format", "--check", ".")


@nox.session(name="lint-fix")
def lint_fix(session: nox.Session) -> None:
    session.install("ruff")
    session.run("ruff", "check", "--fix", ".")
    session.run("ruff", "format", ".")


@nox.session
def typecheck(session: nox.Session) -> None:
    session.install("-e", ".[dev]")
    session.run("mypy", f"src/{PACKAGE}")


@nox.session
def tests(session: nox.Session) -> None:
    """Run pytest without the tests that need a real VLC install."""
    session.install("-e", ".[dev]")
    session.run("pytest", "-q", env={"TOPBAR_BEATS_CI": "1"})


@nox.session(name="tests-vlc")
def tests_vlc(session: nox.Session) -> None:
    """Run the full suite, including tests against libvlc."""
    session.install("-e", ".[dev]")
    session.run("pytest", "-q", *session.posargs)


@nox.session
def coverage(session: nox.Session) -> None:
    session.install("-e", ".[dev]")
    session.run(
        "coverage",
        "run",
        f"--source={PACKAGE}",
        "-m",
        "pytest",
        env={"TOPBAR_BEATS_CI": "1"},
    )
    session.run("coverage", "report", "--fail-under=80", "-m")
