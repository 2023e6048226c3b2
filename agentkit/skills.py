"""Discovery, parsing and validation of SKILL.md agent skill files."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Iterable, Iterator

import yaml

log = logging.getLogger(__name__)

SKILL_FILE_NAME = "SKILL.md"
MAX_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 1024
MAX_COMPATIBILITY_LENGTH = 500

_NAME_PATTERN = re.compile(r"[a-zA-Z0-9]+(-[a-zA-Z0-9]+)*")

_XML_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&apos;"}
)


class SkillValidationError(ValueError):
    """Raised when a skill breaks one or more rules of the specification."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__("\n".join(problems))


@dataclass
class Skill:
    """A parsed SKILL.md file."""

    name: str = ""
    description: str = ""
    license: str = ""
    compatibility: str = ""
    metadata: dict[str, str] = field(default_factory=dict)
    instructions: str = ""
    path: str = ""
    skill_file_path: str = ""

    def validate(self) -> None:
        """Raise SkillValidationError if the skill does not meet the spec."""
        problems: list[str] = []
        if not self.name:
            problems.append("name is required")
        else:
            if len(self.name.encode()) > MAX_NAME_LENGTH:
                problems.append(f"name exceeds {MAX_NAME_LENGTH} characters")
            if not _NAME_PATTERN.fullmatch(self.name):
                problems.append(
                    "name must be alphanumeric with hyphens, "
                    "no leading/trailing/consecutive hyphens"
                )
            if self.path:
                directory = PurePath(self.path).name
                if directory.casefold() != self.name.casefold():
                    problems.append(f'name "{self.name}" must match directory "{directory}"')

        if not self.description:
            problems.append("description is required")
        elif len(self.description.encode()) > MAX_DESCRIPTION_LENGTH:
            problems.append(f"description exceeds {MAX_DESCRIPTION_LENGTH} characters")

        if len(self.compatibility.encode()) > MAX_COMPATIBILITY_LENGTH:
            problems.append(f"compatibility exceeds {MAX_COMPATIBILITY_LENGTH} characters")

        if problems:
            raise SkillValidationError(problems)


def _split_frontmatter(content: str) -> tuple[str, str]:
    content = content.replace("\r\n", "\n")
    if not content.startswith("---\n"):
        raise ValueError("no YAML frontmatter found")
    rest = content[len("---\n"):]
    frontmatter, sep, body = rest.partition("\n---")
    if not sep:
        raise ValueError("unclosed frontmatter")
    return frontmatter, body


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def parse(path: str | os.PathLike[str]) -> Skill:
    """Parse a SKILL.md file; raises OSError or ValueError on failure."""
    file_path = os.fspath(path)
    with open(file_path, encoding="utf-8") as handle:
        content = handle.read()

    frontmatter, body = _split_frontmatter(content)
    try:
        data = yaml.safe_load(frontmatter)
    except yaml.YAMLError as exc:
        raise ValueError(f"parsing frontmatter: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("parsing frontmatter: expected a mapping")

    metadata = data.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise ValueError("parsing frontmatter: metadata must be a mapping")

    return Skill(
        name=_text(data.get("name")),
        description=_text(data.get("description")),
        license=_text(data.get("license")),
        compatibility=_text(data.get("compatibility")),
        metadata={_text(k): _text(v) for k, v in metadata.items()},
        instructions=body.strip(),
        path=os.path.dirname(file_path),
        skill_file_path=file_path,
    )


def _skill_files(base: str) -> Iterator[str]:
    visited: set[str] = set()
    for root, dirs, files in os.walk(base, followlinks=True):
        real = os.path.realpath(root)
        if real in visited:
            dirs[:] = []
            continue
        visited.add(real)
        dirs.sort()
        if SKILL_FILE_NAME in files:
            candidate = os.path.join(root, SKILL_FILE_NAME)
            if os.path.isfile(candidate):
                yield candidate


def discover(paths: Iterable[str | os.PathLike[str]]) -> list[Skill]:
    """Find every valid skill below the given directories."""
    skills: list[Skill] = []
    seen: set[str] = set()
    for base in paths:
        for file_path in _skill_files(os.fspath(base)):
            if file_path in seen:
                continue
            seen.add(file_path)
            try:
                skill = parse(file_path)
            except (OSError, ValueError) as exc:
                log.warning("Failed to parse skill file %s: %s", file_path, exc)
                continue
            try:
                skill.validate()
            except SkillValidationError as exc:
                log.warning("Skill validation failed for %s: %s", file_path, exc)
                continue
            log.debug("Successfully loaded skill %s from %s", skill.name, file_path)
            skills.append(skill)
    return skills


def _escape(text: str) -> str:
    return text.translate(_XML_ESCAPES)


def to_prompt_xml(skills: Iterable[Skill] | None) -> str:
    """Render skills as an XML block for a system prompt."""
    skills = list(skills or [])
    if not skills:
        return ""
    lines = ["<available_skills>"]
    for skill in skills:
        lines += [
            "  <skill>",
            f"    <name>{_escape(skill.name)}</name>",
            f"    <description>{_escape(skill.description)}</description>",
            f"    <location>{_escape(skill.skill_file_path)}</location>",
            "  </skill>",
        ]
    lines.append("</available_skills>")
    return "\n".join(lines)