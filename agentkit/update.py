"""Check whether a newer release is available."""

from __future__ import annotations

import json
import re
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Protocol

USER_AGENT = "agentkit/1.0"
DEFAULT_API_URL = "https://api.github.com"

_GO_INSTALL_VERSION = re.compile(r"v?[0-9]+\.[0-9]+\.[0-9]+-[0-9]+\.[0-9]{14}-[0-9a-f]{12}")


class UpdateCheckError(RuntimeError):
    """Raised when the latest release cannot be fetched."""

    def __init__(self, message: str, info: "Info | None" = None) -> None:
        super().__init__(message)
        self.info = info


@dataclass
class Release:
    """A published release."""

    tag_name: str = ""
    html_url: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Release":
        return cls(tag_name=data.get("tag_name") or "", html_url=data.get("html_url") or "")


class Client(Protocol):
    def latest(self) -> Release: ...


@dataclass
class Info:
    """The running version compared with the latest release."""

    current: str
    latest: str
    url: str = ""

    def is_development(self) -> bool:
        """True for development, dirty or pseudo-version builds."""
        return (
            self.current in ("devel", "unknown")
            or "dirty" in self.current
            or _GO_INSTALL_VERSION.fullmatch(self.current) is not None
        )

    def available(self) -> bool:
        """True if an update is available.

        A stable release replaces a pre-release; a pre-release never
        replaces a stable one; otherwise any difference counts.
        """
        current_pre = "-" in self.current
        latest_pre = "-" in self.latest
        if current_pre and not latest_pre:
            return True
        if latest_pre and not current_pre:
            return False
        return self.current != self.latest


class GitHubClient:
    """Fetches the latest release of a repository from the GitHub API."""

    def __init__(
        self,
        repository: str,
        api_url: str = DEFAULT_API_URL,
        user_agent: str = USER_AGENT,
        timeout: float = 30.0,
    ) -> None:
        self.repository = repository
        self.api_url = api_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout

    def latest(self) -> Release:
        """Return the latest release; raises UpdateCheckError on a non-OK status."""
        request = urllib.request.Request(
            f"{self.api_url}/repos/{self.repository}/releases/latest",
            headers={
                "User-Agent": self.user_agent,
                "Accept": "application/vnd.github.v3+json",
            },
            method="GET",
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                body = response.read()
                status = response.status
        except urllib.error.HTTPError as exc:
            text = exc.read().decode("utf-8", errors="replace")
            raise UpdateCheckError(f"GitHub API returned status {exc.code}: {text}") from exc
        if status != 200:
            text = body.decode("utf-8", errors="replace")
            raise UpdateCheckError(f"GitHub API returned status {status}: {text}")
        data = json.loads(body)
        if not isinstance(data, dict):
            raise ValueError("release must be a JSON object")
        return Release.from_dict(data)


def check(current: str, client: Client) -> Info:
    """Compare ``current`` with the client's latest release.

    Raises UpdateCheckError, carrying the partial Info, if fetching fails.
    """
    info = Info(current=current, latest=current)
    try:
        release = client.latest()
    except Exception as exc:
        raise UpdateCheckError(f"failed to fetch latest release: {exc}", info) from exc
    info.latest = release.tag_name.removeprefix("v")
    info.current = info.current.removeprefix("v")
    info.url = release.html_url
    return info