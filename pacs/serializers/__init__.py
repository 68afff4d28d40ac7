from .import_serializers import ImportRequestSerializer, ImportStatusSerializer

__all__ = [
    'ImportRequestSerializer',
    'ImportStatusSerializer',
]
