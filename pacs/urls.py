"""
pacs app URL configuration
"""
from django.urls import path

from pacs.views import ImportListView

app_name = 'pacs'

urlpatterns = [
    path('api/imports/', ImportListView.as_view(), name='imports'),
]
