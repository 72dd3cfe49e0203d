# Domain Stats Package
from .models import ReviewEvent, StatsLedger

__all__ = ["ReviewEvent", "StatsLedger"]
