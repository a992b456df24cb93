from django.http import Http404, HttpResponse
from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiTypes

from apps.accounts.permissions import IsOutletUser

from .models import Voucher
from .permissions import CanViewVoucher
from .rendering import render_voucher_card
from .serializers import (
    VoucherSerializer,
    VoucherListSerializer,
    VoucherIssueSerializer,
    VoucherRedeemSerializer,
    VoucherFilterSerializer,
    VoucherLookupSerializer,
)
from .services import (
    issue_voucher,
    redeem_voucher,
    filter_vouchers,
    find_vouchers,
    get_voucher_by_id,
    build_vouchers_csv,
)
from .exceptions import (
    VoucherNotFoundError,
    VoucherNotRedeemableError,
    VoucherExpiredError,
    IssuerNotAllowedError,
    InvalidVoucherDataError,
)


class VoucherPagination(PageNumberPagination):
    """Custom pagination for vouchers."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class VoucherViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for the voucher lifecycle.

    All business logic is handled by services.

    list: Vouchers visible to the caller (filters: status, voucher_type,
          outlet (admin), search, issued_from, issued_to)
    create: Issue a voucher at the caller's outlet (outlet users)
    retrieve: Voucher details (id is case-insensitive)
    redeem: Redeem against a bill (outlet users, any outlet's voucher)
    card: Branded PNG voucher card
    lookup: Find by voucher id or recipient mobile across outlets
    export: CSV of the filtered list
    """

    queryset = Voucher.objects.select_related('outlet', 'issued_by', 'redeemed_by')
    serializer_class = VoucherSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = VoucherPagination

    def get_queryset(self):
        params = self._filter_params()
        return filter_vouchers(
            user=self.request.user,
            status=params.get('status'),
            voucher_type=params.get('voucher_type'),
            outlet_id=params.get('outlet'),
            search=params.get('search'),
            issued_from=params.get('issued_from'),
            issued_to=params.get('issued_to'),
        )

    def _filter_params(self):
        serializer = VoucherFilterSerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    def get_object(self):
        try:
            voucher = get_voucher_by_id(voucher_id=self.kwargs['pk'])
        except VoucherNotFoundError:
            raise Http404
        self.check_object_permissions(self.request, voucher)
        return voucher

    def get_serializer_class(self):
        if self.action == 'list':
            return VoucherListSerializer
        if self.action == 'create':
            return VoucherIssueSerializer
        return VoucherSerializer

    def get_permissions(self):
        if self.action in ['create', 'redeem']:
            return [IsAuthenticated(), IsOutletUser()]
        if self.action in ['retrieve', 'card']:
            return [IsAuthenticated(), CanViewVoucher()]
        return [IsAuthenticated()]

    @extend_schema(
        request=VoucherIssueSerializer,
        responses={201: VoucherSerializer},
        description="Issue a voucher at the caller's outlet.",
        tags=['vouchers'],
    )
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            voucher = issue_voucher(issued_by=request.user, **serializer.validated_data)
        except IssuerNotAllowedError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except InvalidVoucherDataError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(VoucherSerializer(voucher).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=VoucherRedeemSerializer,
        responses={200: VoucherSerializer},
        description="Redeem an issued voucher against a bill number.",
        tags=['vouchers'],
    )
    @action(detail=True, methods=['post'])
    def redeem(self, request, pk=None):
        serializer = VoucherRedeemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            voucher = redeem_voucher(
                voucher_id=pk,
                redemption_bill_no=serializer.validated_data['redemption_bill_no'],
                redeemed_by=request.user,
            )
        except VoucherNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (VoucherNotRedeemableError, VoucherExpiredError) as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except InvalidVoucherDataError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(VoucherSerializer(voucher).data)

    @extend_schema(
        responses={(200, 'image/png'): OpenApiTypes.BINARY},
        description="Download the branded voucher card as PNG.",
        tags=['vouchers'],
    )
    @action(detail=True, methods=['get'])
    def card(self, request, pk=None):
        voucher = self.get_object()
        response = HttpResponse(render_voucher_card(voucher), content_type='image/png')
        response['Content-Disposition'] = f'attachment; filename="{voucher.id}.png"'
        return response

    @extend_schema(
        parameters=[
            OpenApiParameter('q', OpenApiTypes.STR, description='Voucher id or recipient mobile'),
        ],
        responses={200: VoucherSerializer(many=True)},
        description="Check voucher status by id or mobile, across all outlets.",
        tags=['vouchers'],
    )
    @action(detail=False, methods=['get'])
    def lookup(self, request):
        query_serializer = VoucherLookupSerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        vouchers = find_vouchers(query_serializer.validated_data['q'])
        return Response(VoucherSerializer(vouchers, many=True).data)

    @extend_schema(
        responses={(200, 'text/csv'): OpenApiTypes.STR},
        description="Export the filtered voucher list as CSV.",
        tags=['vouchers'],
    )
    @action(detail=False, methods=['get'])
    def export(self, request):
        content = build_vouchers_csv(self.get_queryset())
        filename = f"vouchers-{timezone.localdate():%Y%m%d}.csv"
        response = HttpResponse(content, content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response
