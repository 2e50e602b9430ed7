"""WSGI config for the Harbour site."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "harbour_core.settings")

application = get_wsgi_application()
