"""WSGI entry point for the cryptogram crossword backend."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "cryptogram_site.settings")

application = get_wsgi_application()
