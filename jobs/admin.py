from django.contrib import admin

from .models import Job, JobImportSource


@admin.register(JobImportSource)
class JobImportSourceAdmin(admin.ModelAdmin):
    list_display = ("company", "source_type", "source_identifier", "fetch_status", "last_fetched_at")
    list_filter = ("source_type", "fetch_status")


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ("title", "display_company", "status", "source_type", "posted_at")
    list_filter = ("status", "source_type", "workplace_type")
    search_fields = ("title", "company_name", "company__name")
    raw_id_fields = ("company", "source")
