"""Session context shared by the ledger, profile and transcript operations.

The orchestrator lives in `padi.session.orchestrator`.
"""

from padi.session.models import FencingToken, Session, SessionState

__all__ = ["FencingToken", "Session", "SessionState"]
