"""
ASGI config for country_currency project.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "country_currency.settings")

application = get_asgi_application()
