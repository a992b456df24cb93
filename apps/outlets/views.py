from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination

from apps.accounts.permissions import IsAdminRole

from .models import Outlet
from .serializers import (
    OutletSerializer,
    OutletCreateSerializer,
    OutletUpdateSerializer,
)
from .services import (
    create_outlet,
    update_outlet,
    delete_outlet,
    OutletNotFoundError,
    DuplicateOutletCodeError,
)


class OutletPagination(PageNumberPagination):
    """Custom pagination for outlets."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class OutletViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Outlet CRUD operations.

    list: Get all outlets
    create: Create an outlet (admin only)
    retrieve: Get a specific outlet
    update: Update an outlet (admin only)
    partial_update: Partially update an outlet (admin only)
    destroy: Delete an outlet and unassign its staff (admin only)
    """

    queryset = Outlet.objects.prefetch_related('staff')
    serializer_class = OutletSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = OutletPagination

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'create':
            return OutletCreateSerializer
        if self.action in ['update', 'partial_update']:
            return OutletUpdateSerializer
        return OutletSerializer

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['create', 'update', 'partial_update', 'destroy']:
            return [IsAuthenticated(), IsAdminRole()]
        return [IsAuthenticated()]

    def create(self, request, *args, **kwargs):
        """Create a new outlet."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            outlet = create_outlet(**serializer.validated_data)
        except DuplicateOutletCodeError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(OutletSerializer(outlet).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update outlet details; PUT and PATCH both apply only supplied fields."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            outlet = update_outlet(outlet_id=self.kwargs['pk'], **serializer.validated_data)
        except OutletNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except DuplicateOutletCodeError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(OutletSerializer(outlet).data)

    def destroy(self, request, *args, **kwargs):
        """Delete an outlet."""
        try:
            delete_outlet(outlet_id=self.kwargs['pk'])
        except OutletNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)
