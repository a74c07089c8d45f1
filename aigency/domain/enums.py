"""Domain enumerations for company tasks.

Stored task documents use several spellings for the same state
("Complete", "completed", "Needs attention", "Upcoming"). Each enum has a
parse() classmethod that is the only place legacy values are mapped to the
canonical member; repositories call it on read.
"""

from enum import Enum

from aigency.domain.exceptions import ValidationException


class TaskStatus(str, Enum):
    """Task lifecycle status. Moves only forward: upcoming -> needs_attention -> completed."""

    UPCOMING = "upcoming"
    NEEDS_ATTENTION = "needs_attention"
    COMPLETED = "completed"

    @classmethod
    def values(cls) -> list[str]:
        """Return all canonical status values."""
        return [status.value for status in cls]

    @classmethod
    def parse(cls, raw: str | None) -> "TaskStatus":
        """Map a stored or submitted status string to the canonical member.

        Case, surrounding whitespace, and space/hyphen separators are
        ignored; "complete" is accepted as an alias of "completed".

        Raises:
            ValidationException: If the value is empty or unknown.
        """
        if isinstance(raw, cls):
            return raw
        key = (raw or "").strip().lower().replace(" ", "_").replace("-", "_")
        status = _STATUS_ALIASES.get(key)
        if status is None:
            raise ValidationException(
                f"Unknown task status {raw!r}; expected one of {cls.values()}",
                field="status",
            )
        return status

    @property
    def rank(self) -> int:
        """Position in the lifecycle (higher is later)."""
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = (TaskStatus.UPCOMING, TaskStatus.NEEDS_ATTENTION, TaskStatus.COMPLETED)

_STATUS_ALIASES: dict[str, TaskStatus] = {
    "upcoming": TaskStatus.UPCOMING,
    "needs_attention": TaskStatus.NEEDS_ATTENTION,
    "completed": TaskStatus.COMPLETED,
    "complete": TaskStatus.COMPLETED,
}


class TaskKind(str, Enum):
    """Who completes the task: a person, or the automated-task executor."""

    MANUAL = "manual"
    AUTOMATED = "automated"

    @classmethod
    def parse(cls, tag: str | None) -> "TaskKind":
        """Map a stored tag to a kind.

        The legacy tag "ai" and "automated" mean AUTOMATED; every other tag
        ("manual", "waiting", "approved", missing) is a person's task.
        """
        if isinstance(tag, cls):
            return tag
        if (tag or "").strip().lower() in ("ai", "automated"):
            return cls.AUTOMATED
        return cls.MANUAL

    @property
    def storage_tag(self) -> str:
        """Tag written to task documents (the executor filters on "ai")."""
        return "ai" if self is TaskKind.AUTOMATED else "manual"
