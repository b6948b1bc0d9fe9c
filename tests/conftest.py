import pytest
from rest_framework.test import APIClient

from tests.factories import AdminFactory, UserFactory


@pytest.fixture(autouse=True)
def enable_db_access_for_all_tests(db):
    """
    Automatically enable database access for all tests.
    This fixture runs for every test function.
    """
    pass


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_user():
    return AdminFactory()


@pytest.fixture
def member():
    return UserFactory()


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(admin_user)
    return client


@pytest.fixture
def member_client(member):
    client = APIClient()
    client.force_authenticate(member)
    return client
