from datetime import timedelta

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from training_app.utils import parse_date_param

MAX_SCHEDULE_DAYS = 366


def schedule_range(params):
    """``startDate``/``endDate`` from the query string, defaulting to the current week."""
    today = timezone.localdate()
    week_start = today - timedelta(days=today.weekday())
    start = parse_date_param(params, "startDate", week_start)
    end = parse_date_param(params, "endDate", start + timedelta(days=6))
    if end < start:
        raise ValidationError({"endDate": ["Must not be before startDate."]})
    if (end - start).days >= MAX_SCHEDULE_DAYS:
        raise ValidationError({"endDate": [f"Range is limited to {MAX_SCHEDULE_DAYS} days."]})
    return start, end
