from django.apps import AppConfig


class ChatConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.chat'

    def ready(self):
        """Import signals when app is ready"""
        import backend.chat.signals  # noqa: F401
