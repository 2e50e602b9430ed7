from functools import wraps

from django.contrib import messages
from django.contrib.auth.views import redirect_to_login
from django.shortcuts import resolve_url
from django.conf import settings

from accounts.models import User


def role_required(allowed_roles):
    """
    Decorator to ensure the session user has one of the required roles.
    allowed_roles: List of User.Role values (e.g. [User.Role.ADMIN])

    Anonymous visitors go to the login page with ``next`` set. Logged in
    users without the role are sent back to login with an error message.
    """

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped_view(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return redirect_to_login(request.get_full_path(), resolve_url(settings.LOGIN_URL))

            if request.user.role in allowed_roles or request.user.is_superuser:
                return view_func(request, *args, **kwargs)

            messages.error(
                request,
                "Access Denied: You do not have permission to view this page.",
            )
            return redirect_to_login(request.get_full_path(), resolve_url(settings.LOGIN_URL))

        return _wrapped_view

    return decorator


def manage_required(view_func):
    """Decorator for the /manage backend, admins only"""
    return role_required([User.Role.ADMIN])(view_func)
