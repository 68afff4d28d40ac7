"""
DRF Serializers for the folder import API.
"""
from rest_framework import serializers


class ImportRequestSerializer(serializers.Serializer):
    """Input serializer for starting an import."""
    path = serializers.CharField(
        required=True,
        trim_whitespace=True,
        help_text="File or directory on the server to import"
    )


class ImportStatusSerializer(serializers.Serializer):
    """One tracked import; counters are live while the import is running."""
    path = serializers.CharField()
    state = serializers.ChoiceField(choices=['running', 'done'])
    root_path = serializers.CharField()
    imported = serializers.IntegerField()
    duplicates = serializers.IntegerField()
    errors = serializers.IntegerField()
    files_seen = serializers.IntegerField()
    started_at = serializers.DateTimeField()
    finished_at = serializers.DateTimeField(allow_null=True)
