from django.conf import settings

from core.models import SiteConfig
from core.registry import SECTIONS


def site(request):
    """
    Site name, Turnstile key and section visibility for every template.

    ``sections`` maps each public section to whether it is shown, so the
    navigation can hide switched-off areas.
    """
    return {
        "site_name": settings.SITE_NAME,
        "site_url": settings.SITE_URL,
        "turnstile_site_key": settings.TURNSTILE_SITE_KEY,
        "sections": SiteConfig.section_visibility(SECTIONS),
    }
