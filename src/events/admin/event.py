from django.contrib import admin

from events import models


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["title", "start", "end", "location_city", "location_state"]
    list_filter = ["location_state"]
    search_fields = ["title", "location_name", "location_city"]
    date_hierarchy = "start"
