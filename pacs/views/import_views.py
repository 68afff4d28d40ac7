"""
Folder import API.

GET    /api/imports/   list tracked imports
POST   /api/imports/   start an import of a server-side path
DELETE /api/imports/   forget finished imports
"""
import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from pacs.containers import get_import_registry
from pacs.exceptions import ImportRejected, InvalidPath
from pacs.serializers import ImportRequestSerializer, ImportStatusSerializer

logger = logging.getLogger('pacs.views')


class ImportListView(APIView):
    """
    Start and monitor folder imports.

    POST /api/imports/
    {
        "path": "/data/dicom/incoming"
    }

    Returns 202 with {"started": true, "path": "<canonical path>"}; started
    is false when an import of the same path is already tracked.
    """
    permission_classes = [AllowAny]

    def get_registry(self):
        return get_import_registry()

    def get(self, request: Request) -> Response:
        imports = self.get_registry().import_status()
        return Response({'imports': ImportStatusSerializer(imports, many=True).data})

    def post(self, request: Request) -> Response:
        """Handle POST request with JSON body."""
        input_serializer = ImportRequestSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(
                input_serializer.errors,
                status=status.HTTP_400_BAD_REQUEST
            )

        path = input_serializer.validated_data['path']
        registry = self.get_registry()

        try:
            canonical = registry.canonicalize(path)
            started = registry.add_import(canonical)
        except InvalidPath as e:
            logger.warning(f"Rejected import request: {e}")
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except ImportRejected as e:
            logger.warning(f"Import pool full, rejected {path}: {e}")
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        logger.info(f"Import request for {canonical}: {'started' if started else 'already tracked'}")
        return Response(
            {'started': started, 'path': canonical},
            status=status.HTTP_202_ACCEPTED
        )

    def delete(self, request: Request) -> Response:
        removed = self.get_registry().cleanup_completed()
        return Response({'removed': removed})
