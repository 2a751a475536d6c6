"""
Core models - shared abstract bases.
"""

from django.db import models


class TimeStampedModel(models.Model):
    """
    Abstract base that records creation and last-modification times.

    `updated_at` only moves on save(); queryset.update() callers must set it
    themselves.
    """

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
