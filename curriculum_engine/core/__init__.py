"""
Core Module - Shared enums used across content, practice and study.
"""

from curriculum_engine.core.modes import CYCLE_LENGTH, DAY_SEQUENCE, Modality, mode_for_day

__all__ = [
    "CYCLE_LENGTH",
    "DAY_SEQUENCE",
    "Modality",
    "mode_for_day",
]
