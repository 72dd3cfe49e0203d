# Application Stats Package
from .metrics_calculator import (
    CategoryProgress,
    MasteryProjection,
    QualityBreakdown,
    ReviewStatistics,
    StatisticsCalculator,
    quality_breakdown,
)
from .service import LedgerService, apply_review_to_ledger

__all__ = [
    "StatisticsCalculator",
    "ReviewStatistics",
    "QualityBreakdown",
    "CategoryProgress",
    "MasteryProjection",
    "quality_breakdown",
    "LedgerService",
    "apply_review_to_ledger",
]
