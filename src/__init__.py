"""App-Tracker: job application and grocery savings tracking."""

__version__ = "0.1.0"
