from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from .analytics import AnalyticsQueries
from .serializers import (
    # Input serializers
    StatsQuerySerializer,
    # Response serializers
    VoucherStatsSerializer,
    PackageStatsSerializer,
    DashboardResponseSerializer,
    ErrorSerializer,
)
from .exceptions import (
    AnalyticsServiceError,
    OutletNotFoundError,
    NoOutletAssignedError,
)


STATS_PARAMETERS = [
    OpenApiParameter('year', OpenApiTypes.INT, description='Year (defaults to current)'),
    OpenApiParameter('month', OpenApiTypes.INT, description='Month 1-12 (defaults to current)'),
    OpenApiParameter('outlet', OpenApiTypes.UUID, description='Outlet filter (admins only)'),
]


def _error_response(error):
    if isinstance(error, OutletNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, NoOutletAssignedError):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(error)}, status=code)


def _query_params(request):
    query_serializer = StatsQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    return query_serializer.validated_data


@extend_schema(
    parameters=STATS_PARAMETERS,
    responses={
        200: VoucherStatsSerializer,
        400: ErrorSerializer,
        403: ErrorSerializer,
    },
    description="Vouchers issued, redeemed and expired in a month.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def voucher_stats(request):
    """Monthly voucher stats - thin HTTP handler."""
    params = _query_params(request)

    try:
        outlet_id = AnalyticsQueries.resolve_outlet(user=request.user, outlet_id=params.get('outlet'))
        data = AnalyticsQueries.voucher_stats(
            year=params.get('year'),
            month=params.get('month'),
            outlet_id=outlet_id,
        )
    except AnalyticsServiceError as e:
        return _error_response(e)

    return Response(VoucherStatsSerializer(data).data)


@extend_schema(
    parameters=STATS_PARAMETERS,
    responses={
        200: PackageStatsSerializer,
        400: ErrorSerializer,
        403: ErrorSerializer,
    },
    description="Active packages, remaining value and service value redeemed in a month.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def package_stats(request):
    """Monthly package stats - thin HTTP handler."""
    params = _query_params(request)

    try:
        outlet_id = AnalyticsQueries.resolve_outlet(user=request.user, outlet_id=params.get('outlet'))
        data = AnalyticsQueries.package_stats(
            year=params.get('year'),
            month=params.get('month'),
            outlet_id=outlet_id,
        )
    except AnalyticsServiceError as e:
        return _error_response(e)

    return Response(PackageStatsSerializer(data).data)


@extend_schema(
    parameters=STATS_PARAMETERS,
    responses={
        200: DashboardResponseSerializer,
        400: ErrorSerializer,
        403: ErrorSerializer,
    },
    description="Home screen summary: voucher stats, package stats and visible outlets.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Get dashboard summary - thin HTTP handler."""
    params = _query_params(request)

    try:
        data = AnalyticsQueries.dashboard(
            user=request.user,
            year=params.get('year'),
            month=params.get('month'),
            outlet_id=params.get('outlet'),
        )
    except AnalyticsServiceError as e:
        return _error_response(e)

    return Response(DashboardResponseSerializer(data).data)
