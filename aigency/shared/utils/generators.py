"""Identifier generation for new task documents (CUID2)."""

from cuid2 import cuid_wrapper

_new_cuid = cuid_wrapper()


def generate_task_id() -> str:
    """Return a fresh collision-resistant id for a company task.

    Ids are allocated before the batch write so that dependency
    references between tasks of one renewal can be rewritten to them.
    """
    task_id = _new_cuid()
    if not isinstance(task_id, str):
        raise TypeError(f"cuid generator returned {type(task_id).__name__}, expected str")
    return task_id
