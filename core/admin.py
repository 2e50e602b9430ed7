from django.contrib import admin

from .models import Comment, Reference, SiteConfig


@admin.register(SiteConfig)
class SiteConfigAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_at")
    search_fields = ("key",)


@admin.register(Reference)
class ReferenceAdmin(admin.ModelAdmin):
    list_display = ("source_type", "source_id", "target_type", "target_id", "relation", "field")
    list_filter = ("source_type", "target_type", "field")
    search_fields = ("reference_text",)


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ("display_author", "content_type", "content_id", "is_private", "created_at")
    list_filter = ("content_type", "is_private")
    search_fields = ("author_name", "content", "ip_hash")
    readonly_fields = ("ip_address", "ip_hash", "user_agent", "created_at")
