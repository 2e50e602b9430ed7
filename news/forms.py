from django import forms
from django.utils import timezone

from core.forms import ManageModelForm
from core.images import COVER
from news.models import News


class NewsForm(ManageModelForm):
    image_fields = {"cover_image": COVER}
    name_field = "title"

    publish_now = forms.BooleanField(
        required=False,
        label="Publish now",
        help_text="Sets the publish date to the current time",
    )

    class Meta:
        model = News
        fields = ["title", "type", "excerpt", "content", "published_at"]
        widgets = {
            "excerpt": forms.Textarea(attrs={"rows": 2}),
            "content": forms.Textarea(attrs={"rows": 16}),
            "published_at": forms.DateTimeInput(
                attrs={"type": "datetime-local"}, format="%Y-%m-%dT%H:%M"
            ),
        }
        help_texts = {"published_at": "Leave empty to keep this article as a draft"}

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get("publish_now") and not cleaned_data.get("published_at"):
            cleaned_data["published_at"] = timezone.now()
        return cleaned_data
