from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User


@admin.register(User)
class HarbourUserAdmin(UserAdmin):
    list_display = ("email", "username", "role", "is_staff", "last_login")
    list_filter = ("role", "is_staff", "is_active")
    ordering = ("email",)
    fieldsets = UserAdmin.fieldsets + (("Site Access", {"fields": ("role",)}),)
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "username", "password1", "password2", "role")}),
    )
