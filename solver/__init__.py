"""Generator-Modul (Greedy-Platzierung mit Feasibility-Cache)."""

from .cache import FeasibilityCache
from .ranking import rank_courses
from .assignment import TeacherAssignmentResolver
from .slot_search import SlotSearchEngine, GenerationRun, Placed, Unplaced, generate_time_slots
from .conflicts import ConflictResolver, ConflictResolution
from .pinning import PinManager, PinnedLesson
from .scheduler import (
    ScheduleGenerator,
    GenerationResult,
    GenerationStatus,
    GenerationMetrics,
    GenerationInputError,
)

__all__ = [
    "FeasibilityCache",
    "rank_courses",
    "TeacherAssignmentResolver",
    "SlotSearchEngine",
    "GenerationRun",
    "Placed",
    "Unplaced",
    "generate_time_slots",
    "ConflictResolver",
    "ConflictResolution",
    "PinManager",
    "PinnedLesson",
    "ScheduleGenerator",
    "GenerationResult",
    "GenerationStatus",
    "GenerationMetrics",
    "GenerationInputError",
]
