import typing as t

from ninja_extra import ControllerBase

from accounts.models import Account


class UserAwareController(ControllerBase):
    def user(self) -> Account:
        """Get the user for this request."""
        return t.cast(Account, self.context.request.user)  # type: ignore[union-attr]
