"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ConversationId, UserId, TaskId, ApartmentId wrap str — never mix them in signatures
    - All valid states encoded as Enums — no raw string matching in handlers
    - OperationName is the closed set of operations the dispatcher accepts

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (tool input/result is JSON)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NewType


# ─── Identity Types ──────────────────────────────────────────────

ConversationId = NewType("ConversationId", str)
UserId = NewType("UserId", str)
TaskId = NewType("TaskId", str)
ApartmentId = NewType("ApartmentId", str)


# ─── Enums ───────────────────────────────────────────────────────

class OperationName(str, Enum):
    """The 4 operations advertised to the provider and accepted by dispatch."""
    UPDATE_TASK_TIME = "update_task_time"
    UPDATE_TASK_INFO = "update_task_info"
    MANAGE_APARTMENT_ASSIGNMENTS = "manage_apartment_assignments"
    SHOW_USER_APARTMENTS = "show_user_apartments"


class ChangeType(str, Enum):
    """Which task time field a time change targets."""
    CHECKIN = "checkin"
    CHECKOUT = "checkout"

    @property
    def task_field(self) -> str:
        return f"{self.value}_time"


class AssignmentAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class UserRole(str, Enum):
    ADMIN = "admin"
    CLEANER = "cleaner"
    USER = "user"


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class DispatchResult:
    """The only value that leaves the dispatcher: success flag + user text."""
    success: bool
    message: str

    def to_dict(self) -> dict:
        return {"success": self.success, "message": self.message}


@dataclass(frozen=True)
class SituationalFacts:
    """Caller facts resolved by the transport before interpretation."""
    caller_id: UserId
    is_admin: bool
    assigned_apartment_ids: list[ApartmentId] = field(default_factory=list)
    open_tasks: list[dict[str, Any]] = field(default_factory=list)
