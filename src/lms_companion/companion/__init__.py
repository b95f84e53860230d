"""Phone-to-companion state synchronization."""

from .codec import (
    ASSIGNMENTS_KEY,
    GRADES_KEY,
    SCHEDULE_KEY,
    PayloadDecodeError,
    decode_collection,
    encode_collection,
    encode_context,
)
from .models import WatchAssignment, WatchGrade, WatchScheduleEntry
from .receiver import ActivationState, CompanionSyncReceiver, loop_dispatcher, run_inline
from .sender import CompanionSender
from .transport import CompanionSession, CompanionTransportError, ContextTransport

__all__ = [
    "ASSIGNMENTS_KEY",
    "ActivationState",
    "CompanionSender",
    "CompanionSession",
    "CompanionSyncReceiver",
    "CompanionTransportError",
    "ContextTransport",
    "GRADES_KEY",
    "PayloadDecodeError",
    "SCHEDULE_KEY",
    "WatchAssignment",
    "WatchGrade",
    "WatchScheduleEntry",
    "decode_collection",
    "encode_collection",
    "encode_context",
    "loop_dispatcher",
    "run_inline",
]
