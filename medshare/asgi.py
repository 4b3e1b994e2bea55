"""
ASGI config for the medshare project.

Every lifecycle call is a short request/response, so plain HTTP is all
that is served here.
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "medshare.settings")

application = get_asgi_application()
