"""Unit tests for LocalLoginFlow

Runs against the in-memory user store from conftest.
"""

from unittest.mock import patch

import pytest

from signin_service.core.auth import (
    EmailAlreadyRegistered,
    InvalidCredentials,
    StoreError,
    UserNotFound,
)
from signin_service.domain.models import Provider, ProviderProfile


@pytest.mark.unit
class TestAuthenticate:
    """Test email/password authentication"""

    @pytest.mark.asyncio
    async def test_authenticate_success(self, local_flow):
        """Happy path: correct password returns the registered record"""
        alice = await local_flow.register("Alice", "alice@example.com", "pw123")

        user = await local_flow.authenticate("alice@example.com", "pw123")

        assert user.user_id == alice.user_id
        assert user.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_authenticate_wrong_password(self, local_flow):
        """Bad input: wrong password raises InvalidCredentials"""
        await local_flow.register("Alice", "alice@example.com", "pw123")

        with pytest.raises(InvalidCredentials, match="Incorrect password"):
            await local_flow.authenticate("alice@example.com", "wrong")

    @pytest.mark.asyncio
    async def test_authenticate_unknown_email(self, local_flow):
        """Bad input: unknown email raises UserNotFound"""
        await local_flow.register("Alice", "alice@example.com", "pw123")

        with pytest.raises(UserNotFound, match="Incorrect email"):
            await local_flow.authenticate("bob@example.com", "x")

    @pytest.mark.asyncio
    async def test_errors_are_distinguishable(self, local_flow):
        """Unknown email and wrong password produce different error types"""
        await local_flow.register("Alice", "alice@example.com", "pw123")

        with pytest.raises(UserNotFound) as not_found:
            await local_flow.authenticate("bob@example.com", "pw123")
        with pytest.raises(InvalidCredentials) as mismatch:
            await local_flow.authenticate("alice@example.com", "nope")

        assert type(not_found.value) is not type(mismatch.value)

    @pytest.mark.asyncio
    async def test_authenticate_store_failure(self, local_flow, user_store):
        """Error handling: store outage surfaces as StoreError"""
        user_store.available = False

        with pytest.raises(StoreError):
            await local_flow.authenticate("alice@example.com", "pw123")

    @pytest.mark.asyncio
    async def test_federated_record_cannot_login_locally(self, local_flow, federated_flow):
        """Edge case: a record created by provider login has no guessable password"""
        await federated_flow.authenticate(
            Provider.GOOGLE, "g-1", ProviderProfile(name="Dan", email="dan@example.com")
        )

        with pytest.raises(InvalidCredentials):
            await local_flow.authenticate("dan@example.com", "")


@pytest.mark.unit
class TestRegister:
    """Test local registration"""

    @pytest.mark.asyncio
    async def test_register_stores_hash_not_password(self, local_flow, user_store):
        user = await local_flow.register("Alice", "alice@example.com", "pw123")

        stored = user_store.users[user.user_id]
        assert stored.password_hash != "pw123"
        assert stored.google_id is None
        assert stored.github_id is None

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, local_flow):
        """Bad input: an email can only be registered once"""
        await local_flow.register("Alice", "alice@example.com", "pw123")

        with pytest.raises(EmailAlreadyRegistered):
            await local_flow.register("Other Alice", "alice@example.com", "pw456")


@pytest.mark.unit
class TestUnknownEmailTiming:
    """Unknown emails still pay for one bcrypt check"""

    @pytest.mark.asyncio
    async def test_unknown_email_runs_password_check(self, local_flow, verifier):
        with patch.object(verifier, "verify", wraps=verifier.verify) as verify:
            with pytest.raises(UserNotFound):
                await local_flow.authenticate("nobody@example.com", "pw123")

        verify.assert_awaited_once()
        assert verify.await_args.args[1] == "pw123"

    @pytest.mark.asyncio
    async def test_dummy_hash_is_reused(self, local_flow, verifier):
        with patch.object(verifier, "hash_password", wraps=verifier.hash_password) as hashed:
            for _ in range(2):
                with pytest.raises(UserNotFound):
                    await local_flow.authenticate("nobody@example.com", "pw123")

        hashed.assert_awaited_once()
