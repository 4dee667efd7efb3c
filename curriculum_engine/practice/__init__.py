"""
Practice payload compilers.

Each modality has a compiler registered with @register. A compiler turns a
vocabulary item or grammar structure into a PracticeItem whose payload fits
the modality, falling back to another modality when the primary material
(transcript segment, example sentence, quiz question) is missing.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from curriculum_engine.core.modes import Modality

if TYPE_CHECKING:
    from curriculum_engine.content.models import ContentRecord

    from .base import CompileContext, PayloadCompiler, PracticeItem


# Compiler registry - populated by @register decorator
COMPILERS: dict[Modality, "PayloadCompiler"] = {}


def register(modality: Modality):
    """Decorator to register a payload compiler for a modality."""
    def decorator(cls):
        COMPILERS[modality] = cls()
        return cls
    return decorator


def get_compiler(modality: str | Modality) -> "PayloadCompiler | None":
    """Get the compiler for a modality."""
    if isinstance(modality, str):
        try:
            modality = Modality(modality.lower())
        except ValueError:
            return None
    return COMPILERS.get(modality)


def fallback(
    record: "ContentRecord", item: "PracticeItem", ctx: "CompileContext", modality: Modality
) -> "PracticeItem":
    """Recompile an item under another modality."""
    return COMPILERS[modality].compile(record, replace(item, modality=modality), ctx)


# Import compilers to trigger registration
from . import flashcard  # noqa: E402
from . import gap_fill  # noqa: E402
from . import quiz  # noqa: E402
from . import scramble  # noqa: E402

_missing = set(Modality) - set(COMPILERS)
if _missing:
    raise RuntimeError(f"No payload compiler registered for: {sorted(m.value for m in _missing)}")

from .base import (  # noqa: E402
    CompileContext,
    FlashcardPayload,
    GapFillPayload,
    MultipleChoicePayload,
    Payload,
    PendingPayload,
    PracticeItem,
    ScramblePayload,
)
from .compiler import compile_item, compile_quiz  # noqa: E402
from .quiz import effective_modality  # noqa: E402

__all__ = [
    "COMPILERS",
    "CompileContext",
    "FlashcardPayload",
    "GapFillPayload",
    "MultipleChoicePayload",
    "Payload",
    "PendingPayload",
    "PracticeItem",
    "ScramblePayload",
    "compile_item",
    "compile_quiz",
    "effective_modality",
    "fallback",
    "get_compiler",
    "register",
]
