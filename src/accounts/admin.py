"""Admin interface for accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from accounts.models import Account


@admin.register(Account)
class AccountAdmin(UserAdmin):  # type: ignore[type-arg]
    """Account admin with the marketplace-specific fields."""

    list_display = ["username", "email", "preferred_name", "is_staff", "date_joined"]
    search_fields = ["username", "email", "preferred_name", "first_name", "last_name", "document"]
    fieldsets = (
        *UserAdmin.fieldsets,  # type: ignore[misc]
        ("Marketplace", {"fields": ("preferred_name", "document")}),
    )
