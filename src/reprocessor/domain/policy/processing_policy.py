"""Which downstream phases a reprocessing batch may request."""

from __future__ import annotations

from collections.abc import Iterable

from ..models.manifest import ProcessingConfig

VALID_PHASES = ("pinax", "cheimarros", "description")

VALID_PROMPT_KEYS = ("general", "reorganization", "pinax", "description", "cheimarros")


def processing_config_for(phases: Iterable[str]) -> ProcessingConfig:
    """
    Map requested phases to processing switches.

    OCR and reorganization never run when reprocessing existing entities,
    whatever the request asks for.
    """
    requested = set(phases)
    return ProcessingConfig(
        ocr=False,
        reorganize=False,
        pinax="pinax" in requested,
        cheimarros="cheimarros" in requested,
        describe="description" in requested,
    )
