import logging

from django.conf import settings
from django.core import signing
from django.core.files.storage import default_storage
from django.http import FileResponse, Http404
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from academic_requests.models import Attachment, Request
from academic_requests.serializers import AttachmentSerializer
from academic_requests.services import access_control, attachment_service

logger = logging.getLogger(__name__)


class RequestAttachmentListCreateView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, id: int, *args, **kwargs):
        requete = get_object_or_404(Request, pk=id)
        if not access_control.can_view_request(requete, request.user):
            return Response({'detail': 'Not authorized to view attachments'}, status=status.HTTP_403_FORBIDDEN)
        qs = attachment_service.list_attachments(requete, request.user)
        return Response(AttachmentSerializer(qs, many=True).data)

    def post(self, request, id: int, *args, **kwargs):
        requete = get_object_or_404(Request, pk=id)
        files = request.FILES.getlist('files') or request.FILES.getlist('file')
        created = attachment_service.upload_files(requete, request.user, files)
        return Response(AttachmentSerializer(created, many=True).data, status=status.HTTP_201_CREATED)


class AttachmentSignedUrlView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, id: int, *args, **kwargs):
        attachment = get_object_or_404(Attachment.objects.select_related('request'), pk=id)
        if not access_control.can_view_request(attachment.request, request.user):
            return Response({'detail': 'Not authorized to download this attachment'}, status=status.HTTP_403_FORBIDDEN)

        ttl = getattr(settings, 'ATTACHMENT_SIGNED_URL_TTL', 3600)
        url = attachment_service.create_signed_url(attachment.file_path, ttl)
        return Response({'url': request.build_absolute_uri(url), 'expires_in': ttl})


class AttachmentDownloadView(APIView):
    """Serves a file to whoever holds a valid signed token."""
    permission_classes = (AllowAny,)
    authentication_classes = ()

    def get(self, request, *args, **kwargs):
        token = request.query_params.get('token') or ''
        try:
            path = attachment_service.resolve_signed_token(token)
        except signing.SignatureExpired:
            return Response({'detail': 'Download link has expired'}, status=status.HTTP_403_FORBIDDEN)
        except signing.BadSignature:
            return Response({'detail': 'Invalid download link'}, status=status.HTTP_403_FORBIDDEN)

        attachment = Attachment.objects.filter(file_path=path).first()
        if attachment is None:
            raise Http404('Attachment not found')

        try:
            handle = default_storage.open(path, 'rb')
        except FileNotFoundError:
            logger.warning('Attachment %s is missing from storage (%s)', attachment.id, path)
            raise Http404('Attachment file not found')

        return FileResponse(
            handle,
            as_attachment=True,
            filename=attachment.file_name,
            content_type=attachment.file_type or None,
        )
