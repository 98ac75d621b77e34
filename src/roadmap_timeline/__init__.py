"""Roadmap Timeline: Gantt layout and lazy task expansion for project portfolios."""

__version__ = "0.1.0"
