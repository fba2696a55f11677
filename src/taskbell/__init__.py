"""taskbell: local task reminders with sound, desktop and in-app alerts."""

__version__ = "0.1.0"
