from django.contrib.auth import authenticate, get_user_model
from django.db import IntegrityError, transaction
from rest_framework import serializers

from accounts.models import Person, Role
from training_app.exceptions import InvalidCredentials

User = get_user_model()


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get("request"),
            username=attrs["username"],
            password=attrs["password"],
        )
        # a missing person means an admin-only account
        if user is None or user.person_id is None:
            raise InvalidCredentials()
        attrs["user"] = user
        return attrs


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(min_length=3, max_length=20)
    password = serializers.CharField(min_length=6, max_length=20, write_only=True, trim_whitespace=False)
    name     = serializers.CharField(min_length=2, max_length=20)
    role     = serializers.ChoiceField(choices=Role.choices)

    def validate_username(self, value):
        if User.objects.filter(username=value).exists():
            raise serializers.ValidationError("Username is already taken.")
        return value

    def create(self, validated_data):
        # person and account succeed or fail together
        try:
            with transaction.atomic():
                person = Person.objects.create(name=validated_data["name"], role=validated_data["role"])
                user = User.objects.create_user(
                    username=validated_data["username"],
                    password=validated_data["password"],
                    person=person,
                )
        except IntegrityError:
            raise serializers.ValidationError({"username": ["Username is already taken."]})
        return user

    def to_representation(self, user):
        return {
            "personId": user.person.person_id,
            "accountId": user.account_id,
            "username": user.username,
            "name": user.person.name,
            "role": user.person.role,
            "roleDisplay": user.person.get_role_display(),
        }


class SessionUserSerializer(serializers.Serializer):
    """User block returned with a fresh login token."""
    id          = serializers.IntegerField(source="person.person_id")
    name        = serializers.CharField(source="person.name")
    role        = serializers.CharField(source="person.role")
    roleDisplay = serializers.CharField(source="person.get_role_display")
    accountId   = serializers.IntegerField(source="account_id")
