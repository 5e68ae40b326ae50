"""
Personal Planner - Local-first health and fitness planner state store.

Keeps a single self-migrating JSON document (profile, goal, workout
templates and logs, meals, routine checklist and daily entries).
"""

__version__ = "0.1.0"
