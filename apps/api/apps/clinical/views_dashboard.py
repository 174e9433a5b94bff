"""
Cross-record endpoints: global search and the dashboard.
"""
from django.conf import settings
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.clinical import stats
from apps.clinical.search import search_all
from apps.core.observability.correlation import bind_user_id


class DoctorScopedView(APIView):

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        bind_user_id(request.user.pk)


class GlobalSearchView(DoctorScopedView):
    """
    GET /api/search/global/?q=

    Buckets for patients, consultations, notes, exams and prescriptions,
    each with at most five matches.
    """

    def get(self, request):
        return Response(search_all(request.user, request.query_params.get('q', '')))


class DashboardStatsView(DoctorScopedView):
    """GET /api/dashboard/stats/"""

    def get(self, request):
        return Response(stats.dashboard_stats(request.user))


class RecentActivityView(DoctorScopedView):
    """GET /api/dashboard/recent-activity/?limit=10"""

    def get(self, request):
        try:
            limit = int(request.query_params.get('limit', 10))
        except (TypeError, ValueError):
            limit = 10
        limit = min(max(limit, 1), settings.CLINICAL_MAX_PAGE_SIZE)
        return Response({'activities': stats.recent_activity(request.user, limit)})
