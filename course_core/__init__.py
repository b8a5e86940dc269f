# =============================================================================
# course_core/__init__.py
# Core package for the Student Course System
# =============================================================================
"""
Student Course System core.

Courses and their enrolled students are managed against a remote REST
backend and mirrored into a local SQLite cache, so lists stay viewable
while offline.
"""

__version__ = "1.0.0"
