"""Utility modules."""
from exam_api.utils.numbers import clamp01, percent, round_half_up
from exam_api.utils.time_utils import ensure_utc, epoch_seconds, isoformat_utc, utc_now

__all__ = [
    "clamp01",
    "percent",
    "round_half_up",
    "ensure_utc",
    "epoch_seconds",
    "isoformat_utc",
    "utc_now",
]
