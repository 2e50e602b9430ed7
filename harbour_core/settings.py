"""
Django settings for the Harbour community directory.

Values come from the environment (or a ``.env`` file next to ``manage.py``)
through django-environ. See ``.env.example`` for the full list.
"""

from pathlib import Path

import environ

from harbour_core.logging_config import initialize_logging

BASE_DIR = Path(__file__).resolve().parent.parent

env = environ.Env(
    DEBUG=(bool, True),
    ALLOWED_HOSTS=(list, ["localhost", "127.0.0.1", "testserver"]),
    SITE_URL=(str, "http://localhost:8000"),
    SITE_NAME=(str, "Harbour"),
    SITE_TIMEZONE=(str, "America/St_Johns"),
    TURNSTILE_SITE_KEY=(str, ""),
    TURNSTILE_SECRET_KEY=(str, ""),
    POSTHOG_API_KEY=(str, ""),
    POSTHOG_HOST=(str, "https://us.i.posthog.com"),
)
environ.Env.read_env(BASE_DIR / ".env")

initialize_logging(
    debug=env("DEBUG"),
    level=env("LOG_LEVEL", default=None),
    log_dir=env("LOG_DIR", default=str(BASE_DIR / "_logs")),
)

SECRET_KEY = env("SECRET_KEY", default="django-insecure-harbour-development-key")
DEBUG = env("DEBUG")
ALLOWED_HOSTS = env("ALLOWED_HOSTS")
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=[])

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django.contrib.humanize",
    "rest_framework",
    "accounts",
    "core",
    "directory",
    "events",
    "news",
    "jobs",
    "api",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "core.middleware.RequestLoggingMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "core.middleware.ErrorTrackingMiddleware",
]

ROOT_URLCONF = "harbour_core.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
                "core.context_processors.site",
            ],
        },
    },
]

WSGI_APPLICATION = "harbour_core.wsgi.application"

DATABASES = {
    "default": env.db("DATABASE_URL", default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
}

AUTH_USER_MODEL = "accounts.User"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
]

LOGIN_URL = "accounts:login"
LOGIN_REDIRECT_URL = "manage:index"
LOGOUT_REDIRECT_URL = "home"

# Admin sessions last 30 days
SESSION_COOKIE_AGE = 60 * 60 * 24 * 30
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = "Lax"
SESSION_COOKIE_SECURE = not DEBUG
CSRF_COOKIE_SECURE = not DEBUG

LANGUAGE_CODE = "en-ca"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
MEDIA_URL = "/images/"
MEDIA_ROOT = Path(env("MEDIA_ROOT", default=str(BASE_DIR / "media")))

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "DEFAULT_PAGINATION_CLASS": "api.pagination.LinkHeaderPagination",
    "EXCEPTION_HANDLER": "core.error_handling.api_exception_handler",
    "UNAUTHENTICATED_USER": None,
}

# Site
SITE_URL = env("SITE_URL").rstrip("/")
SITE_NAME = env("SITE_NAME")
SITE_TIMEZONE = env("SITE_TIMEZONE")

# Cloudflare Turnstile
TURNSTILE_SITE_KEY = env("TURNSTILE_SITE_KEY")
TURNSTILE_SECRET_KEY = env("TURNSTILE_SECRET_KEY")
COMMENT_RATE_LIMIT = env.int("COMMENT_RATE_LIMIT", default=5)

# PostHog, disabled without a key
POSTHOG_API_KEY = env("POSTHOG_API_KEY")
POSTHOG_HOST = env("POSTHOG_HOST")

JOB_IMPORT_TIMEOUT = env.int("JOB_IMPORT_TIMEOUT", default=20)
