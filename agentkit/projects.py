"""A persistent list of project directories, most recently used first."""

from __future__ import annotations

import json
import os
import re
import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Iterable

PROJECTS_FILE_NAME = "projects.json"

_TIME = re.compile(
    r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    moment = moment.astimezone(UTC)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    return text + "Z"


def _parse_time(text: str) -> datetime:
    match = _TIME.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")
    base, fraction, zone = match.groups()
    if fraction:
        base += "." + fraction[:6].ljust(6, "0")
    if zone == "Z":
        zone = "+00:00"
    return datetime.fromisoformat(base + zone)


@dataclass
class Project:
    """A tracked project directory."""

    path: str
    data_dir: str
    last_accessed: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "data_dir": self.data_dir,
            "last_accessed": _format_time(self.last_accessed),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        raw_time = data.get("last_accessed") or "0001-01-01T00:00:00Z"
        return cls(
            path=data.get("path") or "",
            data_dir=data.get("data_dir") or "",
            last_accessed=_parse_time(raw_time),
        )


class ProjectStore:
    """Reads and writes the projects file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = os.fspath(path)
        self._lock = threading.RLock()

    @classmethod
    def in_directory(cls, directory: str | os.PathLike[str]) -> "ProjectStore":
        """A store for the projects file inside the given directory."""
        return cls(os.path.join(os.fspath(directory), PROJECTS_FILE_NAME))

    def load(self) -> list[Project]:
        """Read the projects; a missing file means none. Raises ValueError on bad JSON."""
        with self._lock:
            try:
                with open(self.path, encoding="utf-8") as handle:
                    data = json.load(handle)
            except FileNotFoundError:
                return []
            if not isinstance(data, dict):
                raise ValueError("projects file must hold a JSON object")
            items = data.get("projects") or []
            if not isinstance(items, list):
                raise ValueError("projects must be a JSON array")
            return [Project.from_dict(item) for item in items]

    def save(self, projects: Iterable[Project]) -> None:
        """Write the projects, creating the directory if needed."""
        content = json.dumps(
            {"projects": [p.to_dict() for p in projects]}, indent=2, ensure_ascii=False
        )
        with self._lock:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, mode=0o700, exist_ok=True)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)

    def register(self, working_dir: str, data_dir: str) -> None:
        """Add or refresh a project and keep the list sorted by last access."""
        now = datetime.now(UTC)
        with self._lock:
            projects = self.load()
            for project in projects:
                if project.path == working_dir:
                    project.data_dir = data_dir
                    project.last_accessed = now
                    break
            else:
                projects.append(Project(working_dir, data_dir, now))
            projects.sort(key=lambda p: p.last_accessed, reverse=True)
            self.save(projects)

    def list(self) -> list[Project]:
        """All tracked projects in stored order."""
        return self.load()