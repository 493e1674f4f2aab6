"""Domain layer for ledgerlink application."""

# Services depend on ledgerlink.database, which itself imports the entities
# from this package, so services are resolved lazily
_SERVICES = {
    "AccountService": "ledgerlink.domain.account",
    "CategoryService": "ledgerlink.domain.category",
    "LedgerService": "ledgerlink.domain.ledger",
    "ReconciliationService": "ledgerlink.domain.reconciliation",
    "PendingTransferService": "ledgerlink.domain.pending_transfers",
    "TransferDetectionService": "ledgerlink.domain.detection",
    "TransferReviewService": "ledgerlink.domain.transfer_review",
    "reconcile": "ledgerlink.domain.reconciliation",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
