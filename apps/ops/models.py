"""Back-office useful links (carrier portals, customs tools, internal docs)."""

import uuid
from django.db import models


class BackofficeLink(models.Model):
    id          = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    category    = models.CharField(max_length=80)
    label       = models.CharField(max_length=120)
    url         = models.URLField(max_length=500)
    description = models.TextField(blank=True)
    sort_order  = models.IntegerField(default=100)
    # DELETE only clears this flag
    is_active   = models.BooleanField(default=True)
    created_at  = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["category", "sort_order", "label"]

    def __str__(self):
        return f"{self.category} / {self.label}"
