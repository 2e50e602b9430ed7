from django.contrib import admin

from .models import Company, Group, Person, Product, Project, Technology


class SluggedAdmin(admin.ModelAdmin):
    search_fields = ("name", "slug")
    readonly_fields = ("created_at", "updated_at")


@admin.register(Company)
class CompanyAdmin(SluggedAdmin):
    list_display = ("name", "location", "visible", "updated_at")
    list_filter = ("visible",)
    filter_horizontal = ("technologies",)


@admin.register(Group)
class GroupAdmin(SluggedAdmin):
    list_display = ("name", "meeting_frequency", "visible")
    list_filter = ("visible",)


@admin.register(Person)
class PersonAdmin(SluggedAdmin):
    list_display = ("name", "github", "visible")
    list_filter = ("visible",)


@admin.register(Project)
class ProjectAdmin(SluggedAdmin):
    list_display = ("name", "type", "status")
    list_filter = ("type", "status")
    filter_horizontal = ("technologies",)


@admin.register(Product)
class ProductAdmin(SluggedAdmin):
    list_display = ("name", "type", "company")
    list_filter = ("type",)


@admin.register(Technology)
class TechnologyAdmin(SluggedAdmin):
    list_display = ("name", "category", "visible")
    list_filter = ("category", "visible")
