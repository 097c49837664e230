"""Reconciliation package."""

from split_engine.reconciliation.evaluator import ReconciliationEvaluator

__all__ = ["ReconciliationEvaluator"]
