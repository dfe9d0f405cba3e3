"""Agri Advisor: recommendation engine for agricultural businesses."""

__version__ = "0.1.0"
