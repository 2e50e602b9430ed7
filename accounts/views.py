from django.contrib.auth.views import LoginView, LogoutView
from loguru import logger

from accounts.forms import EmailAuthenticationForm


class ManageLoginView(LoginView):
    template_name = "accounts/login.html"
    authentication_form = EmailAuthenticationForm

    def form_valid(self, form):
        user = form.get_user()
        if not user.is_site_admin:
            logger.warning("Non-admin login attempt for /manage", user=user.email)
            form.add_error(None, "This account cannot access the manage area.")
            return self.form_invalid(form)
        logger.info("Admin logged in", user=user.email)
        return super().form_valid(form)


class ManageLogoutView(LogoutView):
    next_page = "home"
