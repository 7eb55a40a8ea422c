"""Background workers for article generation"""
from .generation_worker import GenerationWorkerPool
from .ledger_reconciler import LedgerReconcilerWorker

__all__ = ["GenerationWorkerPool", "LedgerReconcilerWorker"]
