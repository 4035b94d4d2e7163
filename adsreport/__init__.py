"""Reporting, annotation, audience, audit and campaign-group helpers for ads analytics."""

__version__ = "0.1.0"

__all__ = [
    "models",
    "formatting",
    "annotate",
    "analytics",
    "audiences",
    "audit",
    "campaign_groups",
]