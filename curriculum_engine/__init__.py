"""
Adaptive spaced-repetition practice engine.

Decides which vocabulary and grammar items a student practices each day and
in which format, and reschedules every item from the student's grades.
"""

__version__ = "0.1.0"
