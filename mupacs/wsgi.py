"""
WSGI config for the mupacs project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'mupacs.settings')

application = get_wsgi_application()
