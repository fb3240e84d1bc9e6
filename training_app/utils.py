from datetime import date, datetime

from django.utils import timezone
from rest_framework import serializers, status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
TIME_FORMAT = "%H:%M:%S"


def envelope(data=None, message="success", code=status.HTTP_200_OK, **kwargs):
    """Successful response in the ``{code, message, data}`` shape."""
    return Response({"code": code, "message": message, "data": data}, status=code, **kwargs)


class LabelChoiceField(serializers.ChoiceField):
    """Accepts either the stored value or its label (case-insensitive); renders the value."""
    def to_internal_value(self, data):
        data_str = str(data)
        if data_str in self.choices:
            return data_str
        for key, label in self.choices.items():
            if label == data:
                return key

        for key, label in self.choices.items():
            if label.lower() == data_str.lower():
                return key
        self.fail('invalid_choice', input=data)


def parse_date_param(params, name, default=None):
    """Read an optional ``YYYY-MM-DD`` query parameter."""
    raw = params.get(name)
    if not raw:
        return default
    try:
        return datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError:
        raise ValidationError({name: [f"Use the {DATE_FORMAT} format."]})


def parse_int_param(params, name, default=None, *, minimum=None, maximum=None):
    raw = params.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError({name: ["Must be an integer."]})
    if minimum is not None and value < minimum:
        raise ValidationError({name: [f"Must be at least {minimum}."]})
    if maximum is not None and value > maximum:
        raise ValidationError({name: [f"Must be at most {maximum}."]})
    return value


def parse_bool_param(params, name):
    return str(params.get(name, "")).lower() in ("1", "true", "yes")


def fmt_date(value: date | None):
    return value.strftime(DATE_FORMAT) if value else None


def fmt_time(value):
    return value.strftime(TIME_FORMAT) if value else None


def fmt_datetime(value):
    if value is None:
        return None
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.strftime(DATETIME_FORMAT)
