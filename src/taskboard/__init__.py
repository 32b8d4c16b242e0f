"""
taskboard - workflow engine for a project/task tracking board.

Covers the status/approval state machine, kanban ordering driven by
drag-and-drop gestures, and parent/child hierarchy resolution for work
items (projects, activities, actions).
"""

__version__ = "0.1.0"
