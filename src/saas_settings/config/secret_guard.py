"""Guard against overwriting stored secrets with their own encrypted form.

Readers of the application configuration receive secure values in their
encrypted representation. When a form is resubmitted unchanged, that
ciphertext comes straight back; writing it would replace the real secret with
gibberish. The guard detects the echo and skips the write.
"""

from __future__ import annotations

import logging

from saas_settings.config.models import SettingEntry
from saas_settings.config.types import Decision

logger = logging.getLogger(__name__)


def should_persist(incoming: SettingEntry, existing: SettingEntry | None) -> Decision:
    """Decide whether an incoming entry should be written.

    Args:
        incoming: Entry about to be written
        existing: Currently stored entry (encrypted representation), if any

    Returns:
        Decision.SKIP when a secure entry's value equals the stored value,
        Decision.WRITE otherwise
    """
    if not incoming.secure:
        return Decision.WRITE
    if existing is None:
        logger.info(f"Secret {incoming.name} doesn't exist yet")
        return Decision.WRITE
    if existing.value == incoming.value:
        logger.info(f"Skipping update of secret {incoming.name}: value matches stored value")
        return Decision.SKIP
    return Decision.WRITE
