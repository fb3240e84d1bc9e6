from django.contrib import admin
from django.urls import include, path

from training_app.views.home import health

urlpatterns = [
    path("admin/", admin.site.urls),
    path("health", health, name="health"),
    path("api/", include("training_app.urls.api")),
]
