from django.urls import path

from . import views

urlpatterns = [
    path("users", views.api_users, name="users"),
    path("users/login", views.api_login, name="login"),
]
