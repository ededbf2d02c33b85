"""
Custom user manager for email-based authentication.

Related files:
    - models.py: User model that uses this manager
    - signals.py: Creates the Profile this manager fills in
"""

from django.contrib.auth.models import BaseUserManager

PROFILE_FIELDS = ("first_name", "last_name", "farm_name")


class UserManager(BaseUserManager):
    """
    Custom manager for User model with email-based authentication.

    Profile fields (first_name, last_name, farm_name) may be passed to
    create_user; they are written to the Profile the post_save signal
    creates rather than to User.

    Usage:
        buyer = User.objects.create_user(
            email='buyer@example.com',
            password='securepassword',
            first_name='Ada',
        )
        vendor = User.objects.create_user(
            email='farm@example.com',
            password='securepassword',
            farm_name='Green Acres',
        )
    """

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and save a regular user with the given email and password.

        Raises:
            ValueError: If email is not provided
        """
        if not email:
            raise ValueError("The Email field must be set")

        email = self.normalize_email(email)

        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)

        profile_data = {
            name: extra_fields.pop(name)
            for name in PROFILE_FIELDS
            if name in extra_fields
        }

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)

        if profile_data:
            profile = user.profile
            for name, value in profile_data.items():
                setattr(profile, name, value)
            profile.save(update_fields=[*profile_data, "updated_at"])

        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and save a superuser with the given email and password.

        Raises:
            ValueError: If is_staff or is_superuser is not True
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)
