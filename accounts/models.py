import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class Role(models.TextChoices):
    EMPLOYEE = "employee", "Employee"
    TEACHER  = "teacher",  "Teacher"
    PLANNER  = "planner",  "Planner"


class Person(models.Model):
    person_id  = models.BigAutoField(primary_key=True)
    name       = models.CharField(max_length=50)
    role       = models.CharField(max_length=10, choices=Role.choices)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["person_id"]

    def __str__(self):
        return f"{self.name} ({self.get_role_display()})"


class User(AbstractUser):
    """Login account. ``username`` is the globally unique login name."""
    account_id = models.BigAutoField(primary_key=True)
    person     = models.OneToOneField(
        Person, on_delete=models.CASCADE, related_name="account",
        null=True, blank=True,
    )

    @property
    def role(self):
        return self.person.role if self.person_id else None

    @property
    def name(self):
        return self.person.name if self.person_id else self.username

    def __str__(self):
        return self.username


def new_session_id():
    return secrets.token_hex(32)


class AuthSessionQuerySet(models.QuerySet):
    def active(self, now=None):
        return self.filter(expires_at__gt=now or timezone.now())

    def expired(self, now=None):
        return self.filter(expires_at__lte=now or timezone.now())


class AuthSession(models.Model):
    """Opaque login token; the id is what clients send in the Session-ID header."""
    session_id = models.CharField(primary_key=True, max_length=64, default=new_session_id, editable=False)
    person     = models.ForeignKey(Person, on_delete=models.CASCADE, related_name="auth_sessions")
    role       = models.CharField(max_length=10, choices=Role.choices)
    created_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField()

    objects = AuthSessionQuerySet.as_manager()

    class Meta:
        indexes = [models.Index(fields=["expires_at"], name="authsession_expires_idx")]

    @classmethod
    def open_for(cls, person, *, now=None):
        now = now or timezone.now()
        return cls.objects.create(
            person=person,
            role=person.role,
            created_at=now,
            expires_at=now + timedelta(hours=settings.SESSION_TTL_HOURS),
        )

    def is_expired(self, now=None):
        return self.expires_at <= (now or timezone.now())

    def __str__(self):
        return f"{self.person_id}:{self.session_id[:8]}…"
