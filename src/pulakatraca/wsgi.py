"""WSGI config for the Pulakatraca project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pulakatraca.settings")

application = get_wsgi_application()
