"""Drive a RecitationSession from a live transcription source."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from recitation_checker.core.session import RecitationSession, SessionUpdate
from recitation_checker.transcription.source import TranscriptionSource

logger = logging.getLogger(__name__)


async def track_recitation(
    source: TranscriptionSource,
    session: RecitationSession,
    on_update: Optional[Callable[[SessionUpdate], None]] = None,
) -> Optional[SessionUpdate]:
    """Re-align every transcript update and stop the source once complete.

    HOW: Each update from the source is aligned in full against the
    session's reference. Accepted results go to on_update. When a
    result reaches a completion tier, the source is stopped.

    RULES:
    - Updates are processed one at a time, in arrival order
    - Returns the last accepted SessionUpdate, or None if none arrived
    - Errors raised by the source propagate to the caller
    """
    latest: Optional[SessionUpdate] = None

    async for transcript in source.updates():
        update = session.update(transcript)
        if update is None:
            continue

        latest = update
        if on_update:
            on_update(update)

        if update.complete:
            logger.info("Stopping transcription: %s recitation", update.tier.value)
            source.stop()

    return latest
