from django.urls import path

from . import views

urlpatterns = [
    path("expense-categories", views.api_expense_categories, name="expense_categories"),
    path("expenses", views.api_expenses, name="expenses"),
]
