import pytest

from liveshare_autotest.ui_testing.pages.login_page import AuthenticationError, LoginPage


def scripted(monkeypatch, login_page, logged_in, attempts):
    """
    Replace the browser-facing steps of the login page.

    `logged_in` answers successive is_logged_in() calls (last value repeats).
    `attempts` are the outcomes of successive login attempts: a bool result
    or an exception to raise.
    """
    state = {"checks": list(logged_in), "attempts": list(attempts), "calls": 0, "resets": 0}

    async def is_logged_in():
        checks = state["checks"]
        return checks.pop(0) if len(checks) > 1 else checks[0]

    async def complete_google_auth(context, target_email=""):
        state["calls"] += 1
        outcome = state["attempts"].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def reset_page_state():
        state["resets"] += 1
        return True

    monkeypatch.setattr(login_page, "is_logged_in", is_logged_in)
    monkeypatch.setattr(login_page, "complete_google_auth", complete_google_auth)
    monkeypatch.setattr(login_page, "reset_page_state", reset_page_state)
    return state


def test_retry_policy_from_config(fake_page):
    login_page = LoginPage(fake_page)
    assert login_page.max_retries == 3
    assert login_page.backoff_ms == 3000


async def test_already_logged_in_skips_login(monkeypatch, fake_page):
    login_page = LoginPage(fake_page)
    state = scripted(monkeypatch, login_page, [True], [])

    assert await login_page.authenticate_with_retry(context=None)
    assert state["calls"] == 0


async def test_three_failed_attempts_back_off_linearly(monkeypatch, fake_page):
    login_page = LoginPage(fake_page)
    state = scripted(monkeypatch, login_page, [False], [False, False, False])

    assert not await login_page.authenticate_with_retry(context=None)
    assert state["calls"] == 3
    assert state["resets"] == 3
    # No pause after the last attempt
    assert fake_page.waits == [3000, 6000]


async def test_error_then_success(monkeypatch, fake_page):
    login_page = LoginPage(fake_page)
    state = scripted(
        monkeypatch,
        login_page,
        [False],
        [AuthenticationError("Google sign-in unavailable"), True],
    )

    assert await login_page.authenticate_with_retry(context=None)
    assert state["calls"] == 2
    assert fake_page.waits == [3000]
    assert len(fake_page.screenshots) == 1
    assert fake_page.screenshots[0].startswith("auth-failure-attempt-1_")


async def test_session_detected_after_failed_attempt(monkeypatch, fake_page):
    login_page = LoginPage(fake_page)
    # Initial check, then the check after attempt 1
    state = scripted(monkeypatch, login_page, [False, True], [False, False, False])

    assert await login_page.authenticate_with_retry(context=None)
    assert state["calls"] == 1
    assert state["resets"] == 0


async def test_custom_retry_count_and_backoff(monkeypatch, fake_page):
    login_page = LoginPage(fake_page, max_retries=5, backoff_ms=100)
    scripted(monkeypatch, login_page, [False], [False] * 2)

    assert not await login_page.authenticate_with_retry(context=None, max_retries=2)
    assert fake_page.waits == [100]


async def test_invalid_retry_count(monkeypatch, fake_page):
    login_page = LoginPage(fake_page)
    scripted(monkeypatch, login_page, [False], [])

    with pytest.raises(ValueError):
        await login_page.authenticate_with_retry(context=None, max_retries=0)


async def test_unexpected_errors_propagate(monkeypatch, fake_page):
    login_page = LoginPage(fake_page)
    scripted(monkeypatch, login_page, [False], [RuntimeError("bug in flow")])

    with pytest.raises(RuntimeError):
        await login_page.authenticate_with_retry(context=None)


async def test_email_login_uses_same_policy(monkeypatch, fake_page):
    login_page = LoginPage(fake_page)
    scripted(monkeypatch, login_page, [False], [])
    outcomes = [AuthenticationError("no dashboard"), True]

    async def complete_email_login(email=None, password=None):
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(login_page, "complete_email_login", complete_email_login)

    assert await login_page.authenticate_with_email_retry("user@example.com", "secret")
    assert fake_page.screenshots[0].startswith("email-auth-failure-attempt-1_")


async def test_is_logged_in_with_access_token(fake_page):
    fake_page.evaluate_result = True
    assert await LoginPage(fake_page).is_logged_in()


async def test_is_logged_in_false_when_sign_in_shown(fake_page):
    fake_page.evaluate_error = "SecurityError: localStorage is not available"
    fake_page.add('button:has-text("Sign In")')
    fake_page.add("div.profile-image")

    assert not await LoginPage(fake_page).is_logged_in()


async def test_is_logged_in_from_profile_avatar(fake_page):
    fake_page.evaluate_result = False
    fake_page.add("div.profile-image")

    assert await LoginPage(fake_page).is_logged_in()


async def test_is_logged_in_from_dashboard(fake_page):
    fake_page.evaluate_result = False
    fake_page.add(LoginPage.DASHBOARD_INDICATORS)

    assert await LoginPage(fake_page).is_logged_in()
