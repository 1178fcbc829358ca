"""Document sharing ledger"""

from .service import SharingLedger, SharedDocument

__all__ = ["SharingLedger", "SharedDocument"]
