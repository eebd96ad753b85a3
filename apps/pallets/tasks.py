"""Celery tasks for pallet waves."""

import logging
from celery import shared_task

logger = logging.getLogger("spst.tasks")


@shared_task
def notify_wave_transition(wave_id: str, kind: str):
    """Email the wave's carrier users ("assigned" or "accepted")."""
    from apps.pallets.service import WaveNotifier

    sent = WaveNotifier().send(wave_id, kind)
    logger.info("Wave %s %s notification sent=%s", wave_id, kind, sent)
    return sent
