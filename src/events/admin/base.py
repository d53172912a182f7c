"""Link mixins shared by the events admin classes."""

import typing as t

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html


class UserLinkMixin:
    """Mixin to add a link to the owning account."""

    @admin.display(description="Owner")
    def user_link(self, obj: t.Any) -> str | None:
        user = getattr(obj, "user", None)
        if user is None:
            return None
        url = reverse("admin:accounts_account_change", args=[user.id])
        return format_html('<a href="{}">{}</a>', url, user.username)


class EventLinkMixin:
    """Mixin to add a link to an event."""

    @admin.display(description="Event")
    def event_link(self, obj: t.Any) -> str | None:
        event = getattr(obj, "event", None)
        if event is None:
            return None
        url = reverse("admin:events_event_change", args=[event.id])
        return format_html('<a href="{}">{}</a>', url, event.title)


class TicketLinkMixin:
    """Mixin to add a link to a ticket."""

    @admin.display(description="Ticket")
    def ticket_link(self, obj: t.Any) -> str | None:
        ticket = getattr(obj, "ticket", None)
        if ticket is None:
            return None
        url = reverse("admin:events_ticket_change", args=[ticket.id])
        return format_html('<a href="{}">{}</a>', url, ticket.id)
