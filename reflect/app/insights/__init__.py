"""Mood analytics over journal entries."""

from .analytics import MoodAnalyticsEngine

__all__ = ["MoodAnalyticsEngine"]
