"""
Unit tests for app/services/auth_service.py

The service runs against the in-memory database with the recording e-mail
service; HTTP is not involved.
"""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.results import Ok, ValidationFailure
from app.core.time import as_utc, utcnow
from app.services.auth_service import AuthService
from app.services.credential_store import CredentialStore
from app.services.token_service import get_token_service
from tests.factories import UserFactory
from tests.helpers import code_from, link_params, wrong_code


@pytest.fixture
def service(db_session: AsyncSession, email_service) -> AuthService:
    return AuthService(CredentialStore(db_session), get_token_service(), email_service)


def errors_of(result):
    assert isinstance(result, ValidationFailure), result
    return result.errors


@pytest.mark.asyncio
class TestRegister:
    async def test_creates_unconfirmed_account_and_sends_one_email(self, service: AuthService, outbox):
        result = await service.register("Ann", "Lee", "ann@example.com", "Str0ng!Pass")

        assert isinstance(result, Ok)
        assert result.value.succeeded is True
        assert result.value.token is None
        assert result.value.message == "Registration successful. Please check your email for confirmation."

        user = await service.store.find_by_email("ann@example.com")
        assert user.email_confirmed is False
        assert user.is_active is True
        assert len(outbox) == 1
        assert outbox[0]["subject"] == "Confirm Your Email"
        assert link_params(outbox[0]["body"])["userId"] == user.id

    async def test_duplicate_email(self, service: AuthService, user, outbox):
        result = await service.register("Ann", "Lee", user.email.upper(), "Str0ng!Pass")

        assert errors_of(result) == ["Email is already registered."]
        assert outbox == []

    async def test_policy_errors_surface(self, service: AuthService, outbox):
        result = await service.register("Ann", "Lee", "ann@example.com", "weakpass")

        assert "Passwords must have at least one digit ('0'-'9')." in errors_of(result)
        assert outbox == []

    async def test_email_failure_propagates(self, service: AuthService, mocker):
        mocker.patch.object(service.email, "send_email", side_effect=ConnectionError("broker down"))

        with pytest.raises(ConnectionError):
            await service.register("Ann", "Lee", "ann@example.com", "Str0ng!Pass")


@pytest.mark.asyncio
class TestLogin:
    async def test_same_message_for_unknown_user_and_wrong_password(self, service: AuthService, user):
        unknown = await service.login("nobody@example.com", "Password123!")
        wrong = await service.login(user.email, "Wrong123!")

        assert errors_of(unknown) == errors_of(wrong) == ["Invalid login attempt."]

    async def test_inactive_user_rejected(self, service: AuthService, db_session: AsyncSession):
        inactive = await UserFactory.create_async(db_session, is_active=False)
        await db_session.commit()

        assert errors_of(await service.login(inactive.email, "Password123!")) == ["Invalid login attempt."]

    async def test_unknown_user_still_runs_a_hash_check(self, service: AuthService, user, mocker):
        dummy = mocker.patch("app.services.auth_service.dummy_verify", return_value=False)

        await service.login("nobody@example.com", "Password123!")
        assert dummy.call_count == 1

        await service.login(user.email, "Password123!")
        assert dummy.call_count == 1

    async def test_unconfirmed_user_rejected(self, service: AuthService, unconfirmed_user):
        result = await service.login(unconfirmed_user.email, "Password123!")

        assert errors_of(result) == ["Please confirm your email before logging in."]
        assert unconfirmed_user.refresh_token is None

    async def test_success_persists_refresh_token(self, service: AuthService, user):
        result = await service.login(user.email, "Password123!")

        assert result.value.message == "Login successful"
        assert result.value.refresh_token == user.refresh_token
        expiry = as_utc(user.refresh_token_expiry_time) - utcnow()
        assert timedelta(days=6, hours=23) < expiry <= timedelta(days=7)
        assert user.last_login_date is not None

    async def test_two_factor_challenge(self, service: AuthService, two_factor_user, outbox):
        result = await service.login(two_factor_user.email, "Password123!")

        assert result.value.requires_two_factor is True
        assert result.value.token is None
        assert result.value.refresh_token is None
        assert two_factor_user.two_factor_secret
        assert two_factor_user.refresh_token is None
        # o email leva o código, nunca o segredo
        body = outbox[0]["body"]
        assert two_factor_user.two_factor_secret not in body
        assert get_token_service().validate_two_factor_code(two_factor_user.two_factor_secret, code_from(body))


@pytest.mark.asyncio
class TestValidateTwoFactor:
    async def test_success_clears_secret(self, service: AuthService, two_factor_user, outbox):
        await service.login(two_factor_user.email, "Password123!")
        code = code_from(outbox[0]["body"])

        result = await service.validate_two_factor(two_factor_user.email, code)

        assert result.value.message == "2FA validation successful"
        assert result.value.token and result.value.refresh_token
        assert two_factor_user.two_factor_secret is None
        assert two_factor_user.refresh_token == result.value.refresh_token

    async def test_code_cannot_be_replayed(self, service: AuthService, two_factor_user, outbox):
        await service.login(two_factor_user.email, "Password123!")
        code = code_from(outbox[0]["body"])
        await service.validate_two_factor(two_factor_user.email, code)

        assert errors_of(await service.validate_two_factor(two_factor_user.email, code)) == ["Invalid 2FA code."]

    async def test_wrong_code(self, service: AuthService, two_factor_user):
        await service.login(two_factor_user.email, "Password123!")
        code = wrong_code(two_factor_user.two_factor_secret)

        assert errors_of(await service.validate_two_factor(two_factor_user.email, code)) == ["Invalid 2FA code."]
        assert two_factor_user.refresh_token is None

    async def test_without_challenge(self, service: AuthService, user):
        assert errors_of(await service.validate_two_factor(user.email, "123456")) == ["Invalid 2FA code."]

    async def test_unknown_user(self, service: AuthService):
        assert errors_of(await service.validate_two_factor("nobody@example.com", "123456")) == ["Invalid request."]


@pytest.mark.asyncio
class TestRefresh:
    async def test_rotation(self, service: AuthService, user):
        first = (await service.login(user.email, "Password123!")).value
        last_login = user.last_login_date

        second = await service.refresh_token(first.token, first.refresh_token)

        assert second.value.message == "Token refresh successful"
        assert second.value.refresh_token != first.refresh_token
        assert user.last_login_date == last_login
        replay = await service.refresh_token(first.token, first.refresh_token)
        assert errors_of(replay) == ["Invalid or expired refresh token"]

    async def test_expired_refresh_token(self, service: AuthService, user, db_session: AsyncSession):
        tokens = (await service.login(user.email, "Password123!")).value
        user.refresh_token_expiry_time = utcnow() - timedelta(seconds=1)
        await db_session.commit()

        result = await service.refresh_token(tokens.token, tokens.refresh_token)

        assert errors_of(result) == ["Invalid or expired refresh token"]

    async def test_inactive_user(self, service: AuthService, user, db_session: AsyncSession):
        tokens = (await service.login(user.email, "Password123!")).value
        user.is_active = False
        await db_session.commit()

        result = await service.refresh_token(tokens.token, tokens.refresh_token)

        assert errors_of(result) == ["User not found or inactive"]

    async def test_garbage_access_token(self, service: AuthService):
        assert errors_of(await service.refresh_token("garbage", "whatever")) == ["Invalid token"]


@pytest.mark.asyncio
class TestEmailFlows:
    async def test_confirm_email_with_bad_encoding(self, service: AuthService, unconfirmed_user):
        result = await service.confirm_email(unconfirmed_user.id, "a")

        assert errors_of(result) == ["Invalid token."]

    async def test_confirm_email_unknown_user(self, service: AuthService):
        assert errors_of(await service.confirm_email("missing", "abc")) == ["Invalid user."]

    async def test_forgot_password_unknown_email(self, service: AuthService, outbox):
        result = await service.forgot_password("nobody@example.com")

        assert isinstance(result, Ok)
        assert outbox == []

    async def test_forgot_password_sends_link(self, service: AuthService, user, outbox):
        await service.forgot_password(user.email)

        params = link_params(outbox[0]["body"])
        assert params["email"] == user.email
        assert params["token"]

    async def test_reset_password_unknown_email(self, service: AuthService):
        assert errors_of(await service.reset_password("nobody@example.com", "t", "N3w!Password")) == [
            "Invalid request."
        ]


@pytest.mark.asyncio
class TestTwoFactorSetting:
    async def test_enable_and_disable(self, service: AuthService, user):
        enabled = await service.set_two_factor(user, True)
        assert enabled.value.message == "Two-factor authentication enabled."
        assert user.two_factor_enabled is True

        user.two_factor_secret = "JBSWY3DPEHPK3PXP"
        disabled = await service.set_two_factor(user, False)
        assert disabled.value.message == "Two-factor authentication disabled."
        assert user.two_factor_enabled is False
        assert user.two_factor_secret is None
