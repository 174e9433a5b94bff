"""
Clinical URLs - patients, consultations, anamneses, exams, prescriptions,
notes, global search and dashboard.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    AnamnesisViewSet,
    ConsultationViewSet,
    ExamViewSet,
    NoteViewSet,
    PatientViewSet,
    PrescriptionViewSet,
)
from .views_dashboard import DashboardStatsView, GlobalSearchView, RecentActivityView

router = DefaultRouter()
router.register(r'patients', PatientViewSet, basename='patient')
router.register(r'consultations', ConsultationViewSet, basename='consultation')
router.register(r'anamneses', AnamnesisViewSet, basename='anamnesis')
router.register(r'exams', ExamViewSet, basename='exam')
router.register(r'prescriptions', PrescriptionViewSet, basename='prescription')
router.register(r'notes', NoteViewSet, basename='note')

urlpatterns = [
    path('search/global/', GlobalSearchView.as_view(), name='search-global'),
    path('dashboard/stats/', DashboardStatsView.as_view(), name='dashboard-stats'),
    path('dashboard/recent-activity/', RecentActivityView.as_view(), name='dashboard-recent-activity'),

    # Standard CRUD via router
    path('', include(router.urls)),
]
