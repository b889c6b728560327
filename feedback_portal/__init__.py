"""Hospital feedback portal: citizen submissions, admin triage and replies."""

__version__ = "1.0.0"
