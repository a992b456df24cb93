from django.http import Http404, HttpResponse
from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiTypes

from apps.accounts.models import UserRole
from apps.accounts.permissions import IsAdminRole, IsOutletUser

from .models import PackageTemplate, CustomerPackage
from .permissions import CanViewCustomerPackage
from .rendering import render_package_invoice, render_service_bill
from .serializers import (
    PackageTemplateSerializer,
    CustomerPackageSerializer,
    CustomerPackageListSerializer,
    AssignPackageSerializer,
    RedeemServicesSerializer,
    PackageHistorySerializer,
    ServiceRecordSerializer,
    PackageFilterSerializer,
    PackageLookupSerializer,
)
from .services import PackageLedgerService
from .exceptions import (
    TemplateNotFoundError,
    CustomerPackageNotFoundError,
    TransactionNotFoundError,
    InvalidPackageDataError,
    InsufficientBalanceError,
    PackageOperationNotAllowedError,
)


class PackagePagination(PageNumberPagination):
    """Custom pagination for customer packages."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class PackageTemplateViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet
):
    """
    Package templates. Templates are immutable, so there is no update.

    list, retrieve: Any authenticated user
    create, destroy: Admin only
    """

    queryset = PackageTemplate.objects.all()
    serializer_class = PackageTemplateSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action in ['create', 'destroy']:
            return [IsAuthenticated(), IsAdminRole()]
        return [IsAuthenticated()]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            template = PackageLedgerService.create_template(
                name=serializer.validated_data.get('name', ''),
                package_value=serializer.validated_data['package_value'],
                service_value=serializer.validated_data['service_value'],
            )
        except InvalidPackageDataError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(PackageTemplateSerializer(template).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        try:
            PackageLedgerService.delete_template(template_id=self.kwargs['pk'])
        except TemplateNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(status=status.HTTP_204_NO_CONTENT)


class CustomerPackageViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for customer packages and their service ledger.

    list: Packages visible to the caller (filters: outlet (admin), search, active)
    create: Assign a template to a customer (outlet users)
    retrieve: Package details
    redeem: Draw services as one transaction (outlet users, any outlet's package)
    history: Redemptions grouped by transaction, newest first
    invoice: Sale invoice PNG
    bill: Bill PNG for one redemption transaction
    lookup: Find packages by customer mobile across outlets
    """

    queryset = CustomerPackage.objects.select_related('outlet', 'template', 'assigned_by')
    serializer_class = CustomerPackageSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = PackagePagination
    lookup_value_regex = '[0-9a-fA-F-]{32,36}'

    def get_queryset(self):
        if self.action != 'list':
            return self.queryset

        serializer = PackageFilterSerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        return PackageLedgerService.filter_packages(
            user=self.request.user,
            outlet_id=params.get('outlet'),
            search=params.get('search'),
            active_only=params.get('active', False),
        )

    def get_serializer_class(self):
        if self.action == 'list':
            return CustomerPackageListSerializer
        if self.action == 'create':
            return AssignPackageSerializer
        return CustomerPackageSerializer

    def get_permissions(self):
        if self.action in ['create', 'redeem']:
            return [IsAuthenticated(), IsOutletUser()]
        if self.action in ['retrieve', 'history', 'invoice']:
            return [IsAuthenticated(), CanViewCustomerPackage()]
        return [IsAuthenticated()]

    @extend_schema(
        request=AssignPackageSerializer,
        responses={201: CustomerPackageSerializer},
        description="Assign a package template to a customer at the caller's outlet.",
        tags=['packages'],
    )
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            package = PackageLedgerService.assign_package(
                assigned_by=request.user,
                **serializer.validated_data
            )
        except TemplateNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except PackageOperationNotAllowedError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (InvalidPackageDataError, InsufficientBalanceError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(CustomerPackageSerializer(package).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=RedeemServicesSerializer,
        responses={200: CustomerPackageSerializer},
        description="Redeem services from a package. All services share one bill.",
        tags=['packages'],
    )
    @action(detail=True, methods=['post'])
    def redeem(self, request, pk=None):
        serializer = RedeemServicesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            package, records = PackageLedgerService.redeem_services(
                customer_package_id=pk,
                services=serializer.validated_data['services'],
                redeemed_date=serializer.validated_data.get('redeemed_date'),
                redeemed_by=request.user,
            )
        except CustomerPackageNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except PackageOperationNotAllowedError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (InvalidPackageDataError, InsufficientBalanceError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'package': CustomerPackageSerializer(package).data,
            'transaction_id': records[0].transaction_id,
            'bill_no': records[0].bill_no,
            'services': ServiceRecordSerializer(records, many=True).data,
        })

    @extend_schema(
        responses={200: PackageHistorySerializer(many=True)},
        description="Service history grouped by transaction, newest first.",
        tags=['packages'],
    )
    @action(detail=True, methods=['get'])
    def history(self, request, pk=None):
        package = self.get_object()
        history = PackageLedgerService.get_package_history(customer_package_id=package.id)
        return Response(PackageHistorySerializer(history, many=True).data)

    @extend_schema(
        responses={(200, 'image/png'): OpenApiTypes.BINARY},
        description="Download the package sale invoice as PNG.",
        tags=['packages'],
    )
    @action(detail=True, methods=['get'])
    def invoice(self, request, pk=None):
        package = self.get_object()
        response = HttpResponse(render_package_invoice(package), content_type='image/png')
        response['Content-Disposition'] = (
            f'attachment; filename="invoice-{package.invoice_number}.png"'
        )
        return response

    @extend_schema(
        responses={(200, 'image/png'): OpenApiTypes.BINARY},
        description="Download the bill of one redemption transaction as PNG.",
        tags=['packages'],
    )
    @action(detail=True, methods=['get'], url_path=r'bill/(?P<transaction_id>[^/.]+)')
    def bill(self, request, pk=None, transaction_id=None):
        try:
            package = PackageLedgerService.get_customer_package(customer_package_id=pk)
            records = PackageLedgerService.get_transaction_records(
                customer_package_id=package.id,
                transaction_id=transaction_id,
            )
        except (CustomerPackageNotFoundError, TransactionNotFoundError):
            raise Http404

        if not self._can_print_bill(request.user, package, records):
            return Response(
                {'error': 'This bill belongs to another outlet.'},
                status=status.HTTP_403_FORBIDDEN
            )

        response = HttpResponse(render_service_bill(package, records), content_type='image/png')
        response['Content-Disposition'] = (
            f'attachment; filename="bill-{records[0].bill_no}.png"'
        )
        return response

    @staticmethod
    def _can_print_bill(user, package, records):
        """The package's outlet, or the outlet that recorded the redemption."""
        if user.role == UserRole.ADMIN:
            return True
        if user.outlet_id is None:
            return False
        recorder = records[0].recorded_by
        return (
            package.outlet_id == user.outlet_id
            or (recorder is not None and recorder.outlet_id == user.outlet_id)
        )

    @extend_schema(
        parameters=[
            OpenApiParameter('mobile', OpenApiTypes.STR, description='Customer mobile number'),
        ],
        responses={200: CustomerPackageSerializer(many=True)},
        description="Find a customer's packages by mobile, across all outlets.",
        tags=['packages'],
    )
    @action(detail=False, methods=['get'])
    def lookup(self, request):
        query_serializer = PackageLookupSerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        packages = PackageLedgerService.find_packages_by_mobile(
            query_serializer.validated_data['mobile']
        )
        return Response(CustomerPackageSerializer(packages, many=True).data)
