import math

from rest_framework import serializers


def _finite(value):
    if value is not None and not math.isfinite(value):
        raise serializers.ValidationError("Must be a finite number.")
    return value


class SelfEvaluationSerializer(serializers.Serializer):
    itemId        = serializers.IntegerField()
    selfComment   = serializers.CharField(min_length=50, max_length=1000)
    # 0 or missing means "not rated" and counts as the middle of the scale
    understanding = serializers.IntegerField(min_value=0, max_value=5, required=False, default=3)
    difficulty    = serializers.IntegerField(min_value=0, max_value=5, required=False, default=3)
    satisfaction  = serializers.IntegerField(min_value=0, max_value=5, required=False, default=3)

    def validate(self, attrs):
        for name in ("understanding", "difficulty", "satisfaction"):
            if not attrs.get(name):
                attrs[name] = 3
        return attrs


class GradingSerializer(serializers.Serializer):
    itemId         = serializers.IntegerField()
    personId       = serializers.IntegerField()
    teacherScore   = serializers.FloatField(min_value=0, max_value=100, required=False, allow_null=True)
    teacherComment = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")
    scoreRatio     = serializers.FloatField(min_value=0, max_value=1, required=False, default=0.5)

    def validate_teacherScore(self, value):
        return _finite(value)

    def validate_scoreRatio(self, value):
        return _finite(value)

    def validate(self, attrs):
        if attrs.get("teacherScore") is None and not attrs.get("teacherComment", "").strip():
            raise serializers.ValidationError("Provide a teacherScore or a teacherComment to score.")
        return attrs
