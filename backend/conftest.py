import pytest


@pytest.fixture(autouse=True)
def _test_session_engine(settings):
    # APIClient.force_authenticate(user=None) calls Client.logout(), which
    # needs a session backend; use one that requires no installed app/table.
    settings.SESSION_ENGINE = "django.contrib.sessions.backends.signed_cookies"
