from django.apps import AppConfig


class BlogsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "blogs"

    def ready(self):
        # Connects the like-cleanup receivers
        from . import signals  # noqa: F401
