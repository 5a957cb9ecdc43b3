"""
Model mixins providing reusable functionality for Django models.

This module contains abstract mixin classes that can be combined with
BaseModel to add specific functionality. They are generic infrastructure
classes with no domain-specific logic.

Available Mixins:
    UUIDPrimaryKeyMixin: Use UUID as primary key
    VersionedMixin: Optimistic locking version column

Usage:
    from core.models import BaseModel
    from core.model_mixins import UUIDPrimaryKeyMixin, VersionedMixin

    class Payment(UUIDPrimaryKeyMixin, VersionedMixin, BaseModel):
        amount_cents = models.PositiveBigIntegerField()

Note:
    - Always list mixins before BaseModel in inheritance
    - Mixins are abstract and don't create database tables
"""

from __future__ import annotations

import uuid

from django.db import models
from django.db.models import F


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    Fields:
        id: UUIDField as primary key (auto-generated)

    Usage:
        class BookingRequest(UUIDPrimaryKeyMixin, BaseModel):
            service_category = models.CharField(max_length=100)

        booking = BookingRequest.objects.create(service_category="catering")
        print(booking.id)  # UUID like: 550e8400-e29b-41d4-a716-446655440000

    Note:
        IDs can be generated before the row is inserted, which lets
        callers reference an aggregate before it is persisted.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True


class VersionedMixin(models.Model):
    """
    Optimistic locking support via an auto-incremented version column.

    Every save of an existing row increments ``version`` atomically in the
    database, so a caller holding a stale copy can detect that somebody
    else wrote in between (see bookings.locks.check_version).

    Fields:
        version: Row version, starts at 1

    Usage:
        payment.notes = "Paid at venue"
        payment.save()          # version 1 -> 2
        payment.version         # 2 (refreshed after save)

    Note:
        Only ``version`` is refreshed after save. Models with a protected
        FSMField cannot be refreshed wholesale with refresh_from_db().
    """

    version = models.PositiveIntegerField(
        default=1,
        help_text="Version for optimistic locking - incremented on each save",
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        """
        Save with version auto-increment for optimistic locking.

        On update (not force_insert), atomically increments the version
        field to detect concurrent modifications. A partial save with
        ``update_fields`` always writes ``version`` as well.
        """
        is_update = (
            not self._state.adding
            and self.pk
            and not kwargs.get("force_insert", False)
        )
        if is_update:
            self.version = F("version") + 1
            update_fields = kwargs.get("update_fields")
            if update_fields is not None and "version" not in update_fields:
                kwargs["update_fields"] = [*update_fields, "version"]
        super().save(*args, **kwargs)
        if is_update:
            self.refresh_from_db(fields=["version"])
