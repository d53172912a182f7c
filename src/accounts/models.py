import re
import typing as t
import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models
from django.db.models.functions import Lower


class AccountQueryset(models.QuerySet["Account"]):
    """Queryset for Account."""

    def by_email(self, email: str) -> t.Self:
        """Case-insensitive email match."""
        return self.filter(email__iexact=email.strip())


class AccountManager(UserManager["Account"]):
    def get_queryset(self) -> AccountQueryset:
        """Get queryset for Account."""
        return AccountQueryset(self.model, using=self._db)

    def by_email(self, email: str) -> AccountQueryset:
        """Case-insensitive email match."""
        return self.get_queryset().by_email(email)


class Account(AbstractUser):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    preferred_name = models.CharField(db_index=True, max_length=255, blank=True, help_text="Preferred name")
    document = models.CharField(max_length=18, blank=True, help_text="CPF or CNPJ of the account holder")

    objects = AccountManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]
        constraints = [
            models.UniqueConstraint(
                Lower("email"),
                condition=~models.Q(email=""),
                name="unique_account_email_ci",
            ),
        ]

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's preferred name, or their full name as a fallback."""
        return (
            self.preferred_name or self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
        )
