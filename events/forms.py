from django import forms
from django.forms import inlineformset_factory
from loguru import logger

from core.forms import ManageModelForm
from core.images import COVER, ICON
from events.models import Event, EventDate, EventOccurrence
from events.recurrence import (
    DAY_CHOICES,
    FREQUENCY_CHOICES,
    POSITION_CHOICES,
    RecurrenceError,
    build_rule,
    rule_to_form_values,
)


class EventForm(ManageModelForm):
    image_fields = {"cover_image": COVER, "icon_image": ICON}
    name_field = "title"

    frequency = forms.ChoiceField(choices=FREQUENCY_CHOICES, required=False, label="Repeats")
    day = forms.ChoiceField(choices=[("", "---------")] + DAY_CHOICES, required=False)
    position = forms.ChoiceField(
        choices=POSITION_CHOICES,
        required=False,
        label="Week of month",
        help_text="Only used for monthly events",
    )

    class Meta:
        model = Event
        fields = [
            "title",
            "description",
            "location",
            "link",
            "organizer",
            "requires_signup",
            "recurrence_end",
            "default_start_time",
            "default_end_time",
        ]
        widgets = {
            "description": forms.Textarea(attrs={"rows": 10}),
            "recurrence_end": forms.DateInput(attrs={"type": "date"}, format="%Y-%m-%d"),
            "default_start_time": forms.TimeInput(attrs={"type": "time"}, format="%H:%M"),
            "default_end_time": forms.TimeInput(attrs={"type": "time"}, format="%H:%M"),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk and self.instance.recurrence_rule:
            try:
                self.initial.update(rule_to_form_values(self.instance.recurrence_rule))
            except RecurrenceError as e:
                logger.warning("Stored recurrence rule is invalid", event=self.instance.pk, error=str(e))

    def clean(self):
        cleaned_data = super().clean()
        frequency = cleaned_data.get("frequency")
        if frequency and not cleaned_data.get("day"):
            self.add_error("day", "Day is required for repeating events")
            return cleaned_data
        try:
            cleaned_data["recurrence_rule"] = build_rule(
                frequency, cleaned_data.get("day"), cleaned_data.get("position") or None
            )
        except RecurrenceError as e:
            self.add_error("frequency", str(e))

        start, end = cleaned_data.get("default_start_time"), cleaned_data.get("default_end_time")
        if start and end and end <= start:
            self.add_error("default_end_time", "End time must be after start time")
        return cleaned_data

    @property
    def is_recurring(self) -> bool:
        return bool(self.cleaned_data.get("recurrence_rule"))

    def save(self, commit=True):
        self.instance.recurrence_rule = self.cleaned_data.get("recurrence_rule", "")
        if not self.instance.recurrence_rule:
            self.instance.recurrence_end = None
        return super().save(commit=commit)


class EventDateForm(forms.ModelForm):
    class Meta:
        model = EventDate
        fields = ["start_date", "end_date"]
        widgets = {
            "start_date": forms.DateTimeInput(
                attrs={"type": "datetime-local", "class": "form-control"}, format="%Y-%m-%dT%H:%M"
            ),
            "end_date": forms.DateTimeInput(
                attrs={"type": "datetime-local", "class": "form-control"}, format="%Y-%m-%dT%H:%M"
            ),
        }

    def clean(self):
        cleaned_data = super().clean()
        start, end = cleaned_data.get("start_date"), cleaned_data.get("end_date")
        if start and end and end < start:
            self.add_error("end_date", "End date must be after start date")
        return cleaned_data


def event_date_formset(extra=1):
    return inlineformset_factory(Event, EventDate, form=EventDateForm, extra=extra, can_delete=True)


class OccurrenceOverrideForm(forms.ModelForm):
    """Changes to a single generated date. Blank fields keep the event's values."""

    class Meta:
        model = EventOccurrence
        fields = ["location", "description", "link", "start_time", "end_time"]
        widgets = {
            "location": forms.TextInput(attrs={"class": "form-control"}),
            "description": forms.Textarea(attrs={"class": "form-control", "rows": 3}),
            "link": forms.URLInput(attrs={"class": "form-control"}),
            "start_time": forms.TimeInput(attrs={"type": "time", "class": "form-control"}, format="%H:%M"),
            "end_time": forms.TimeInput(attrs={"type": "time", "class": "form-control"}, format="%H:%M"),
        }
