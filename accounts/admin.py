from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import AuthSession, Person, User


# ───────────────────────────────
#  Person
# ───────────────────────────────
@admin.register(Person)
class PersonAdmin(admin.ModelAdmin):
    list_display = ("person_id", "name", "role", "created_at")
    search_fields = ("name",)
    list_filter = ("role",)


# ───────────────────────────────
#  User (login account)
# ───────────────────────────────
@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "person", "is_staff", "is_active", "date_joined")
    list_filter = ("is_staff", "is_superuser", "is_active", "person__role")
    search_fields = ("username", "person__name")
    ordering = ("-date_joined",)
    autocomplete_fields = ["person"]
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Training", {"fields": ("person",)}),
    )


def purge_expired(modeladmin, request, queryset):
    deleted, _ = queryset.expired().delete()
    modeladmin.message_user(request, f"Deleted {deleted} expired session(s).")
purge_expired.short_description = "Delete expired sessions in selection"


@admin.register(AuthSession)
class AuthSessionAdmin(admin.ModelAdmin):
    list_display = ("person", "role", "created_at", "expires_at")
    list_filter = ("role",)
    search_fields = ("person__name",)
    readonly_fields = ("session_id", "created_at")
    actions = [purge_expired]
