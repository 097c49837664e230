"""Summary export package."""

from split_engine.export.summary import ShareTokenError, SummaryExporter

__all__ = ["ShareTokenError", "SummaryExporter"]
