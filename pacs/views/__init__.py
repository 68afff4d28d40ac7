"""
Views Module - API Views
"""
from .import_views import ImportListView

__all__ = [
    'ImportListView',
]
