from aigency.shared.utils.datetime import coerce_utc, utc_now
from aigency.shared.utils.generators import generate_task_id

__all__ = ["coerce_utc", "generate_task_id", "utc_now"]
