"""mupacs URL configuration."""
from django.urls import include, path

urlpatterns = [
    path('', include('pacs.urls')),
]
