from .attachment_views import AttachmentDownloadView, AttachmentSignedUrlView, RequestAttachmentListCreateView
from .notification_views import NotificationListView, NotificationReadAllView, NotificationReadView
from .queue_views import HandlerQueueView, ValidationQueueView
from .request_views import (
    DecideRequestView,
    HandlerChoicesView,
    MyRequestsView,
    ProcessRequestView,
    RejectValidationView,
    RequestDetailView,
    RequestHistoryView,
    RequestListCreateView,
    RequestStatsView,
    ResubmitRequestView,
    RouteRequestView,
    ValidateRequestView,
)
