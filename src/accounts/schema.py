"""Schema for accounts module."""

from ninja import ModelSchema
from pydantic import UUID4

from .models import Account


class MinimalAccountSchema(ModelSchema):
    id: UUID4
    display_name: str

    class Meta:
        model = Account
        fields = ["id", "email"]
