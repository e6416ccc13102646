"""WSGI config for the eventify project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "eventify.settings")

application = get_wsgi_application()
