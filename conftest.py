import pytest
from django.conf import settings
from django.test import RequestFactory
from pytest_django.lazy_django import django_settings_is_configured

from surrogate_cache.backends import locmem
from surrogate_cache.conf import clear_settings_cache


@pytest.fixture(autouse=True)
def configure_django_settings():
    if not django_settings_is_configured():
        settings.configure()
    clear_settings_cache()
    yield
    clear_settings_cache()
    locmem.outbox.clear()


@pytest.fixture
def request_factory():
    return RequestFactory()


# pytest-django clears mail.outbox, which only exists under its own test
# environment; settings configured above never set one up.
@pytest.fixture(scope="function", autouse=True)
def _dj_autoclear_mailbox():
    pass


class MockUser:
    def __init__(self, authenticated: bool, pk: int = 1):
        self.is_authenticated = authenticated
        self.pk = pk


@pytest.fixture
def anonymous_request(request_factory):
    request = request_factory.get("/blog/post-5/")
    request.user = MockUser(authenticated=False)
    return request


@pytest.fixture
def logged_in_request(request_factory):
    request = request_factory.get("/blog/post-5/")
    request.user = MockUser(authenticated=True, pk=42)
    return request
