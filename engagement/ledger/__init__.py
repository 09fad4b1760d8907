"""Activity ledger"""

from engagement.ledger.activity_ledger import ActivityLedger

__all__ = ["ActivityLedger"]
