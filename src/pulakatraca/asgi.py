"""ASGI config for the Pulakatraca project."""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pulakatraca.settings")

application = get_asgi_application()
