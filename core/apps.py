from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Site Core"

    def ready(self):
        # Import signals to register them
        import core.signals  # noqa: F401
