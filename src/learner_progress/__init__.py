"""Learner progress tracking with event-driven gamification."""

__version__ = "0.1.0"
