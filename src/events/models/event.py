from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel


class Event(TimeStampedModel):
    """A listed event. Listing CRUD lives outside this app; tickets only read from it."""

    title = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")
    start = models.DateTimeField(db_index=True)
    end = models.DateTimeField(db_index=True)
    location_name = models.CharField(max_length=255, blank=True, default="")
    location_city = models.CharField(max_length=120, blank=True, default="")
    location_state = models.CharField(max_length=2, blank=True, default="")
    cover_image = models.ImageField(upload_to="event-covers/", blank=True, null=True)
    cover_image_url = models.URLField(blank=True, default="", help_text="Externally hosted cover image.")

    class Meta:
        ordering = ["start"]

    def __str__(self) -> str:
        return self.title

    def clean(self) -> None:
        """An event cannot end before it starts."""
        super().clean()
        if self.start and self.end and self.end < self.start:
            raise ValidationError({"end": "The event cannot end before it starts."})

    @property
    def has_ended(self) -> bool:
        """Whether the event is over."""
        return self.end < timezone.now()

    @property
    def location(self) -> str:
        """Human readable location line."""
        city = " - ".join(part for part in (self.location_city, self.location_state) if part)
        return ", ".join(part for part in (self.location_name, city) if part)

    @property
    def cover_source(self) -> str | None:
        """Where the cover image can be loaded from: a storage path or an absolute URL."""
        if self.cover_image:
            return self.cover_image.name
        return self.cover_image_url or None
