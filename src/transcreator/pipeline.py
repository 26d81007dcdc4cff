"""
Per-batch translation chain: transcreate -> edit -> QA -> pacing-sync.
"""

import logging

from .agents import AgentService
from .models import Batch, Blueprint, TranslationSettings

logger = logging.getLogger("transcreator")


async def process_batch(
    agents: AgentService,
    batch: Batch,
    blueprint: Blueprint,
    settings: TranslationSettings,
) -> list[str]:
    """Run one batch through all four stages. Any stage fault aborts the batch."""
    first, last = batch[0].sequence, batch[-1].sequence
    logger.debug(f"Batch {first}-{last}: starting stage chain")

    transcreated = await agents.transcreate_batch(batch, blueprint, settings.tone)
    edited = await agents.edit_batch(batch, transcreated, blueprint)
    reviewed = await agents.qa_batch(batch, edited, blueprint)
    final = await agents.phantom_sync(batch, reviewed)

    logger.debug(f"Batch {first}-{last}: stage chain complete")
    return final
