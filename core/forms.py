import json

from django import forms

from core.error_handling import log_exception
from core.images import (
    CropArea,
    ImageUploadError,
    decode_data_url,
    image_url,
    open_image,
    resolve_updated_image,
)
from core.models import CONTENT_TYPE_CHOICES
from core.registry import SECTIONS
from core.utils import unique_slug


class ManageModelForm(forms.ModelForm):
    """
    Base form for the /manage editors.

    * ``image_fields`` maps model fields holding image filenames to their
      processing kind (cover or icon). Each gets hidden ``<field>_data``
      (new upload as a data URL), ``<field>_existing`` (keep current) and
      ``<field>_crop`` (JSON crop box) inputs.
    * ``name_field`` is the field the slug is regenerated from on save.
    """

    image_fields = {}
    name_field = "name"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._original_images = {
            field: getattr(self.instance, field, "") or "" for field in self.image_fields
        }
        for field in self.image_fields:
            self.fields[f"{field}_data"] = forms.CharField(required=False, widget=forms.HiddenInput)
            self.fields[f"{field}_existing"] = forms.CharField(
                required=False,
                widget=forms.HiddenInput,
                initial=self._original_images[field],
            )
            self.fields[f"{field}_crop"] = forms.CharField(required=False, widget=forms.HiddenInput)

        for name, field in self.fields.items():
            widget = field.widget
            if isinstance(widget, forms.HiddenInput):
                continue
            if isinstance(widget, forms.CheckboxInput):
                widget.attrs.setdefault("class", "form-check-input")
            elif isinstance(widget, (forms.Select, forms.SelectMultiple)):
                widget.attrs.setdefault("class", "form-select")
            else:
                widget.attrs.setdefault("class", "form-control")

    def clean(self):
        cleaned_data = super().clean()

        for name, field in self.fields.items():
            if isinstance(field, forms.JSONField) and cleaned_data.get(name) is None:
                cleaned_data[name] = {}

        for field in self.image_fields:
            data_url = cleaned_data.get(f"{field}_data")
            if data_url:
                try:
                    open_image(decode_data_url(data_url))
                except ImageUploadError as e:
                    self.add_error(None, f"{field.replace('_', ' ').capitalize()}: {e}")
            crop = cleaned_data.get(f"{field}_crop")
            if crop:
                try:
                    box = json.loads(crop)
                    area = CropArea(
                        float(box["x"]), float(box["y"]), float(box["width"]), float(box["height"])
                    )
                except (ValueError, KeyError, TypeError):
                    area = None
                if area is None or area.is_empty:
                    self.add_error(None, "Image crop area is invalid")
                else:
                    cleaned_data[f"{field}_crop"] = area
            else:
                cleaned_data[f"{field}_crop"] = None
        return cleaned_data

    def save_images(self, instance):
        for field, kind in self.image_fields.items():
            current = self._original_images[field]
            existing = self.cleaned_data.get(f"{field}_existing")
            with log_exception(f"processing {field} upload"):
                filename = resolve_updated_image(
                    current=current or None,
                    upload=self.cleaned_data.get(f"{field}_data"),
                    existing=existing if existing and existing == current else None,
                    kind=kind,
                    crop=self.cleaned_data.get(f"{field}_crop"),
                )
            setattr(instance, field, filename or "")

    def image_inputs(self):
        """Bound hidden inputs and preview URL per image field, for templates."""
        return [
            {
                "name": field,
                "label": self.instance._meta.get_field(field).verbose_name.capitalize(),
                "kind": kind,
                "current_url": image_url(self._original_images[field]),
                "data": self[f"{field}_data"],
                "existing": self[f"{field}_existing"],
                "crop": self[f"{field}_crop"],
            }
            for field, kind in self.image_fields.items()
        ]

    def slug_text(self, instance) -> str:
        return getattr(instance, self.name_field)

    def save(self, commit=True):
        instance = super().save(commit=False)
        instance.slug = unique_slug(type(instance), self.slug_text(instance), exclude_pk=instance.pk)
        self.save_images(instance)
        if commit:
            instance.save()
            self.save_m2m()
        return instance


class CommentForm(forms.Form):
    content_type = forms.ChoiceField(choices=CONTENT_TYPE_CHOICES)
    content_id = forms.IntegerField(min_value=1)
    author_name = forms.CharField(
        max_length=100,
        required=False,
        widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "Name (optional)"}),
    )
    content = forms.CharField(
        max_length=5000,
        widget=forms.Textarea(attrs={"class": "form-control", "rows": 4}),
        error_messages={"required": "Comment cannot be empty"},
    )
    is_private = forms.BooleanField(
        required=False,
        label="Only visible to site admins",
        widget=forms.CheckboxInput(attrs={"class": "form-check-input"}),
    )

    def clean_content(self):
        content = self.cleaned_data["content"].strip()
        if not content:
            raise forms.ValidationError("Comment cannot be empty")
        return content


class SiteSettingsForm(forms.Form):
    """One checkbox per public section."""

    def __init__(self, *args, visibility=None, **kwargs):
        super().__init__(*args, **kwargs)
        visibility = visibility or {}
        for section in SECTIONS:
            self.fields[f"section_{section}"] = forms.BooleanField(
                required=False,
                label=section.capitalize(),
                initial=visibility.get(section, True),
                widget=forms.CheckboxInput(attrs={"class": "form-check-input"}),
            )

    def visibility(self) -> dict:
        return {section: self.cleaned_data[f"section_{section}"] for section in SECTIONS}

