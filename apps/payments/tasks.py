"""Celery tasks for duties payments."""

import logging
from celery import shared_task

logger = logging.getLogger("spst.tasks")


@shared_task
def send_duties_confirmation(payment_id: str):
    """Customer (EN) and winery (IT) receipts after a PAID webhook."""
    from apps.payments.models import DutiesPayment
    from apps.payments.service import DutiesService

    payment = DutiesPayment.objects.filter(id=payment_id).first()
    if payment is None:
        logger.error("Duties payment %s not found for confirmation", payment_id)
        return None
    return DutiesService().send_confirmations(payment)
