def get_reconciliation_engine():
    from src.models.reconciler.engine import ReconciliationEngine
    return ReconciliationEngine


def get_lookup_processor():
    from .lookup_processor import LookupProcessor
    return LookupProcessor
