"""
Authentication models.

Buyers and vendors share one account type. Whether a user is acting as a
buyer or as a vendor is decided per order (``Order.user`` vs
``Order.vendor``), never by a flag on the account.

- User: email-identified login with a UUID primary key
- Profile: display data read by order notifications (OneToOne with User)

Related files:
    - managers.py: create_user() routes name/farm fields onto the Profile
    - signals.py: creates the Profile on first save
"""

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager
from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class User(UUIDPrimaryKeyMixin, AbstractBaseUser, PermissionsMixin):
    """
    Account used to authenticate API calls.

    The UUID primary key doubles as the ``owner_id`` of the user's wallet
    ledger account. Names live on Profile so that cancellation messages can
    be rendered without touching auth columns.
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        help_text="Login identifier",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive users cannot obtain tokens",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Can sign in to the admin and settle manual refunds",
    )
    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        """Profile full name, or the email when no name was given."""
        try:
            return self.profile.full_name or self.email
        except Profile.DoesNotExist:
            return self.email

    def get_short_name(self):
        local_part = self.email.split("@")[0]
        try:
            return self.profile.first_name or local_part
        except Profile.DoesNotExist:
            return local_part


class Profile(BaseModel):
    """
    Display data for a user.

    ``farm_name`` is only filled in for users who sell; buyer-facing
    messages fall back to "The vendor" when it is blank.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        primary_key=True,
    )
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    farm_name = models.CharField(
        max_length=200,
        blank=True,
        help_text="Trading name shown to buyers",
    )

    class Meta:
        db_table = "authentication_profile"

    def __str__(self):
        return self.full_name or str(self.user)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()
