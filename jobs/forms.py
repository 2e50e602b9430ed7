from django import forms

from core.forms import ManageModelForm
from jobs.importers import get_importer, has_importer
from jobs.models import Job, JobImportSource


class JobForm(ManageModelForm):
    name_field = "title"

    class Meta:
        model = Job
        fields = [
            "title",
            "company",
            "company_name",
            "location",
            "department",
            "workplace_type",
            "salary_range",
            "url",
            "description",
            "status",
            "expires_at",
        ]
        widgets = {
            "description": forms.Textarea(attrs={"rows": 12}),
            "expires_at": forms.DateTimeInput(
                attrs={"type": "datetime-local"}, format="%Y-%m-%dT%H:%M"
            ),
        }
        labels = {"url": "Apply URL", "company_name": "Company name (if not in the directory)"}

    def clean(self):
        cleaned_data = super().clean()
        if not cleaned_data.get("company") and not cleaned_data.get("company_name"):
            self.add_error("company", forms.ValidationError("Company is required", code="required"))
        return cleaned_data

    def slug_text(self, instance) -> str:
        return f"{instance.title} {instance.display_company}".strip()


class JobImportSourceForm(forms.ModelForm):
    class Meta:
        model = JobImportSource
        fields = ["company", "source_type", "source_identifier", "source_url"]
        widgets = {
            "company": forms.Select(attrs={"class": "form-select"}),
            "source_type": forms.Select(attrs={"class": "form-select"}),
            "source_identifier": forms.TextInput(
                attrs={"class": "form-control", "placeholder": "e.g. colabsoftware"}
            ),
            "source_url": forms.URLInput(attrs={"class": "form-control"}),
        }

    def clean(self):
        """Try the board before saving so typos surface immediately."""
        cleaned_data = super().clean()
        source_type = cleaned_data.get("source_type")
        identifier = cleaned_data.get("source_identifier")
        if not source_type or not identifier or self.errors:
            return cleaned_data
        if not has_importer(source_type):
            self.add_error("source_type", f"Unsupported job source type: {source_type}")
            return cleaned_data

        probe = JobImportSource(source_type=source_type, source_identifier=identifier.strip())
        result = get_importer(source_type).validate_config(probe)
        if not result.valid:
            self.add_error("source_identifier", result.error)
        return cleaned_data

    def clean_source_identifier(self):
        return self.cleaned_data["source_identifier"].strip()
