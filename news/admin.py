from django.contrib import admin

from .models import News


@admin.register(News)
class NewsAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "published_at")
    list_filter = ("type",)
    search_fields = ("title", "content")
    date_hierarchy = "published_at"
