"""Route group exports."""

from . import areas, collectors, drafts, health, schedules

__all__ = ["areas", "collectors", "drafts", "health", "schedules"]
