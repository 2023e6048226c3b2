"""Building blocks for coding-agent applications: messages, sessions, skills, shells and more."""

__version__ = "0.1.0"

__all__ = [
    "chunks",
    "language",
    "message",
    "parts",
    "projects",
    "sessions",
    "shell",
    "skills",
    "stringext",
    "token",
    "update",
]