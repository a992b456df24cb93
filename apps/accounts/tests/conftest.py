import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.outlets.models import Outlet


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def outlet(db):
    """Create and return a test outlet."""
    return Outlet.objects.create(
        name='Anna Nagar',
        code='ANN',
        location='Chennai',
    )


@pytest.fixture
def other_outlet(db):
    """Create and return a second outlet."""
    return Outlet.objects.create(
        name='Velachery',
        code='VEL',
        location='Chennai',
    )


@pytest.fixture
def admin_user(db):
    """Create and return an admin account."""
    return User.objects.create_user(
        username='admin',
        password='TestPass123!',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def user(db, outlet):
    """Create and return an outlet user."""
    return User.objects.create_user(
        username='frontdesk',
        password='TestPass123!',
        role=UserRole.USER,
        outlet=outlet,
    )


@pytest.fixture
def user_inactive(db, outlet):
    """Create and return an inactive user."""
    return User.objects.create_user(
        username='inactive',
        password='TestPass123!',
        outlet=outlet,
        is_active=False,
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an API client authenticated as an outlet user."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def admin_client(api_client, admin_user):
    """Return an API client authenticated as admin."""
    refresh = RefreshToken.for_user(admin_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
