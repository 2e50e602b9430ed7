from django.contrib import admin

from .models import Event, EventDate, EventOccurrence


class EventDateInline(admin.TabularInline):
    model = EventDate
    extra = 0


class EventOccurrenceInline(admin.TabularInline):
    model = EventOccurrence
    extra = 0


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("title", "organizer", "recurrence_rule", "updated_at")
    search_fields = ("title", "organizer", "description")
    inlines = [EventDateInline, EventOccurrenceInline]
