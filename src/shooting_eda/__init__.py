"""NYPD shooting incident report.

Loads the public shooting incident dataset, derives weekday/hour and a late-night
flag, fits a binomial model of late-night incidents on location and renders a
Markdown report with its figures.
"""

__all__ = [
    "config",
    "errors",
    "ingest",
    "cleaning",
    "features",
    "aggregates",
    "modeling",
    "figures",
    "report",
    "pipeline",
]

__version__ = "0.1.0"
