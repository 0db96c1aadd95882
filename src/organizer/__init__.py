"""Organizer - personal calendar, mail, contacts, tasks and projects."""

__version__ = "0.1.0"
