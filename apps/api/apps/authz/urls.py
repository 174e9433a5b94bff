"""
Authz URLs - current doctor profile.
"""
from django.urls import path

from .views import CurrentDoctorView

urlpatterns = [
    path('user', CurrentDoctorView.as_view(), name='current-user'),
]
