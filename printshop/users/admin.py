from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ["username", "email", "organization", "role", "is_active"]
    list_filter = ["role", "organization", "is_active"]
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Organization", {"fields": ("organization", "role", "phone")}),
    )
