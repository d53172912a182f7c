"""Admin classes for tickets, holders and the transfer log."""

import typing as t

from django.contrib import admin
from django.http import HttpRequest

from events import models
from events.admin.base import EventLinkMixin, TicketLinkMixin, UserLinkMixin
from events.service.ticket_code import scan_code_for


class TicketHolderInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.TicketHolder
    fk_name = "ticket"
    extra = 0
    fields = ["name", "email", "document", "account", "created_at"]
    readonly_fields = fields
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request: HttpRequest, obj: t.Any = None) -> bool:
        return False


@admin.register(models.Ticket)
class TicketAdmin(admin.ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[type-arg]
    list_display = ["id", "scan_code", "event_link", "user_link", "holder", "status", "transfer_count", "checked_in_at"]
    list_filter = ["status", "is_used", "event"]
    search_fields = ["id", "qr_code", "event__title", "user__username", "user__email", "holder__name"]
    autocomplete_fields = ["event", "user"]
    readonly_fields = ["id", "scan_code", "holder", "transfer_count", "checked_in_at", "checked_in_by"]
    date_hierarchy = "created_at"
    inlines = [TicketHolderInline]

    def get_queryset(self, request: HttpRequest) -> t.Any:
        return super().get_queryset(request).select_related("event", "user", "holder")

    @admin.display(description="Scan code")
    def scan_code(self, obj: models.Ticket) -> str:
        return scan_code_for(obj)


@admin.register(models.TicketHolder)
class TicketHolderAdmin(admin.ModelAdmin, TicketLinkMixin):  # type: ignore[type-arg]
    list_display = ["name", "email", "ticket_link", "account", "created_at"]
    search_fields = ["name", "email", "document", "ticket__id"]
    readonly_fields = ["ticket", "account", "name", "email", "document", "created_at"]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False


@admin.register(models.TicketTransfer)
class TicketTransferAdmin(admin.ModelAdmin, TicketLinkMixin):  # type: ignore[type-arg]
    """Read-only transfer log."""

    list_display = ["transferred_at", "ticket_link", "from_user", "to_user", "to_email", "status", "reason"]
    list_filter = ["status"]
    search_fields = ["ticket__id", "to_email", "from_user__email", "to_user__email"]
    date_hierarchy = "transferred_at"

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_change_permission(self, request: HttpRequest, obj: t.Any = None) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj: t.Any = None) -> bool:
        return False
