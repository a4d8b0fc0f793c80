"""Root URL configuration."""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/v2/fdms/", include("fiscal.urls")),
    path("api/v2/fdms/offline/", include("offline.urls")),
    path("api/v2/", include("pos.urls")),
    path("api/v2/", include("expenses.urls")),
    path("api/v2/", include("accounts.urls")),
    path("api/v2/", include("dashboard.urls")),
    path("api/", include("reports.urls")),
]
