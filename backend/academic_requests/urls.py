from django.urls import path

from academic_requests import views

urlpatterns = [
    path('', views.RequestListCreateView.as_view(), name='requests-list-create'),
    path('mine/', views.MyRequestsView.as_view(), name='requests-mine'),
    path('queue/', views.HandlerQueueView.as_view(), name='requests-handler-queue'),
    path('validation/', views.ValidationQueueView.as_view(), name='requests-validation-queue'),
    path('handlers/', views.HandlerChoicesView.as_view(), name='requests-handlers'),
    path('stats/', views.RequestStatsView.as_view(), name='requests-stats'),
    path('<int:id>/', views.RequestDetailView.as_view(), name='requests-detail'),
    path('<int:id>/validate/', views.ValidateRequestView.as_view(), name='requests-validate'),
    path('<int:id>/reject-validation/', views.RejectValidationView.as_view(), name='requests-reject-validation'),
    path('<int:id>/resubmit/', views.ResubmitRequestView.as_view(), name='requests-resubmit'),
    path('<int:id>/route/', views.RouteRequestView.as_view(), name='requests-route'),
    path('<int:id>/process/', views.ProcessRequestView.as_view(), name='requests-process'),
    path('<int:id>/decide/', views.DecideRequestView.as_view(), name='requests-decide'),
    path('<int:id>/history/', views.RequestHistoryView.as_view(), name='requests-history'),
    path('<int:id>/attachments/', views.RequestAttachmentListCreateView.as_view(), name='requests-attachments'),
]
