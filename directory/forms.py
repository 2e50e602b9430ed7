from django import forms

from core.forms import ManageModelForm
from core.images import COVER, ICON
from directory.models import Company, Group, Person, Product, Project, Technology

MARKDOWN_HELP = "Markdown. Link other entries with [[Name]] or [[{Role} at {Company}]]."


class CompanyForm(ManageModelForm):
    image_fields = {"logo": ICON, "cover_image": COVER}

    class Meta:
        model = Company
        fields = [
            "name",
            "description",
            "website",
            "wikipedia",
            "github",
            "email",
            "location",
            "founded",
            "technologies",
            "visible",
        ]
        widgets = {
            "name": forms.TextInput(attrs={"placeholder": "e.g. CoLab Software"}),
            "description": forms.Textarea(attrs={"rows": 10}),
            "technologies": forms.SelectMultiple(attrs={"size": 8}),
        }
        help_texts = {"description": MARKDOWN_HELP}


class GroupForm(ManageModelForm):
    image_fields = {"logo": ICON, "cover_image": COVER}

    class Meta:
        model = Group
        fields = ["name", "description", "website", "meeting_frequency", "visible"]
        widgets = {
            "description": forms.Textarea(attrs={"rows": 10}),
            "meeting_frequency": forms.TextInput(attrs={"placeholder": "e.g. Second Tuesday of every month"}),
        }
        help_texts = {"description": MARKDOWN_HELP}


class PersonForm(ManageModelForm):
    image_fields = {"avatar": ICON}

    class Meta:
        model = Person
        fields = ["name", "bio", "website", "github", "social_links", "visible"]
        widgets = {
            "bio": forms.Textarea(attrs={"rows": 8}),
            "social_links": forms.Textarea(attrs={"rows": 3}),
        }
        help_texts = {"bio": MARKDOWN_HELP}


class ProjectForm(ManageModelForm):
    image_fields = {"logo": ICON, "cover_image": COVER}

    class Meta:
        model = Project
        fields = ["name", "description", "type", "status", "links", "technologies"]
        widgets = {
            "description": forms.Textarea(attrs={"rows": 10}),
            "links": forms.Textarea(attrs={"rows": 3}),
            "technologies": forms.SelectMultiple(attrs={"size": 8}),
        }
        help_texts = {"description": MARKDOWN_HELP}


class ProductForm(ManageModelForm):
    image_fields = {"logo": ICON, "cover_image": COVER}

    class Meta:
        model = Product
        fields = ["name", "description", "website", "type", "company"]
        widgets = {"description": forms.Textarea(attrs={"rows": 8})}
        help_texts = {"description": MARKDOWN_HELP}


class TechnologyForm(ManageModelForm):
    image_fields = {"icon": ICON}

    class Meta:
        model = Technology
        fields = ["name", "category", "description", "website", "visible"]
        widgets = {"description": forms.Textarea(attrs={"rows": 5})}
