from django.urls import path

from accounts import views

app_name = "accounts"

urlpatterns = [
    path("login", views.ManageLoginView.as_view(), name="login"),
    path("logout", views.ManageLogoutView.as_view(), name="logout"),
]
