"""Points ledger."""

from padi.ledger.ledger import Feature, Ledger

__all__ = ["Feature", "Ledger"]
