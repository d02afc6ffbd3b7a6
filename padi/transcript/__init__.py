"""Chat transcript: messages, stores, realtime feed and synchronizer.

The synchronizer lives in `padi.transcript.synchronizer`.
"""

from padi.transcript.models import (
    ChangeEvent,
    ChangeType,
    Message,
    MessageDraft,
    Role,
)
from padi.transcript.timeline import MessageTimeline

__all__ = [
    "ChangeEvent",
    "ChangeType",
    "Message",
    "MessageDraft",
    "MessageTimeline",
    "Role",
]
