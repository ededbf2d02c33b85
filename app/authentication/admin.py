"""
Django admin configuration for authentication models.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from authentication.models import Profile, User


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    fields = ("first_name", "last_name", "farm_name")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Email-based user admin.

    Staff users reach the manual refund queue from here, so the
    permission fields stay editable.
    """

    inlines = [ProfileInline]
    list_display = ("email", "profile_name", "is_active", "is_staff", "date_joined")
    list_filter = ("is_active", "is_staff", "is_superuser")
    list_select_related = ("profile",)
    search_fields = ("email", "profile__first_name", "profile__last_name", "profile__farm_name")
    ordering = ("-date_joined",)

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Dates", {"fields": ("date_joined", "last_login")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "password1", "password2")}),
    )
    readonly_fields = ("date_joined", "last_login")

    def get_inlines(self, request, obj):
        # The post_save signal creates the Profile on add
        return self.inlines if obj else []

    @admin.display(description="Name")
    def profile_name(self, obj):
        return obj.get_full_name()
