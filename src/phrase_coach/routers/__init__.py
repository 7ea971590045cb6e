"""Router package exports."""

from . import health, phrases, review

__all__ = [
    "health",
    "phrases",
    "review",
]
