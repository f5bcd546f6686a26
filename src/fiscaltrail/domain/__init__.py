"""Domain layer - core business logic."""

from .models import ProcessingProgress, ProcessingResult

__all__ = ["ProcessingProgress", "ProcessingResult"]
