"""Celery tasks for shipment notifications."""

import logging
from celery import shared_task

logger = logging.getLogger("spst.tasks")


@shared_task
def send_shipment_booked_email(shipment_id: str):
    """Booking confirmation to the customer. Best-effort."""
    from apps.shipments.models import Shipment
    from apps.shipments.service import ShipmentService

    shipment = Shipment.objects.filter(id=shipment_id).first()
    if shipment is None:
        logger.error("Shipment %s not found for booked email", shipment_id)
        return False
    return ShipmentService().send_booked_email(shipment)
