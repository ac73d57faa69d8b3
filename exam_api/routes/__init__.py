"""API route modules."""
from exam_api.routes import attempts, statistics

__all__ = ["attempts", "statistics"]
