from django.apps import AppConfig


class CrosswordConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "crossword"
    verbose_name = "Cryptogram crosswords"
