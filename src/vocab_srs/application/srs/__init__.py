# Application SRS Package
from .adaptive import adaptive_update, schedule_adaptive
from .basic import basic_update, schedule_basic
from .insights import generate_learning_insights, suggest_optimal_batch_size
from .normalizer import coerce_quality, normalize_record
from .scheduler import ReviewOptions, ReviewOutcome, Scheduler
from .timing import due_records, format_interval, is_due, time_until_next_review

__all__ = [
    "ReviewOptions",
    "ReviewOutcome",
    "Scheduler",
    "adaptive_update",
    "basic_update",
    "coerce_quality",
    "due_records",
    "format_interval",
    "generate_learning_insights",
    "is_due",
    "normalize_record",
    "schedule_adaptive",
    "schedule_basic",
    "suggest_optimal_batch_size",
    "time_until_next_review",
]
