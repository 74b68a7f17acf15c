from django.urls import path

from academic_requests.views import AttachmentDownloadView, AttachmentSignedUrlView

urlpatterns = [
    path('<int:id>/url/', AttachmentSignedUrlView.as_view(), name='attachment-signed-url'),
    path('download/', AttachmentDownloadView.as_view(), name='attachment-download'),
]
