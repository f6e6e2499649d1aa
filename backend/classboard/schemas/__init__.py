from classboard.schemas.adjustment import (  # noqa: F401
    LocationLockStatus,
    OptimisationStats,
    TimeLockStatus,
)
from classboard.schemas.controller import ControllerSettings  # noqa: F401
from classboard.schemas.event import (  # noqa: F401
    MIN_DURATION_MINUTES,
    Event,
    EventChange,
    EventRecord,
    EventStatus,
)
from classboard.schemas.queue import (  # noqa: F401
    CompactionPlan,
    EventCardState,
    GapReport,
    GapState,
    InsertionPosition,
    InsertionSlot,
    QueueSummary,
    RemovalResult,
    ReorderDirection,
)
