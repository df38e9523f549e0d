"""
Tests for the credential store and password hashing.
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from auth.password import hash_password, verify_password
from auth.store import CredentialStore, DuplicateEmail


class TestPasswordHashing:
    def test_roundtrip(self):
        hashed = hash_password("longenough1", rounds=4)
        assert hashed != "longenough1"
        assert verify_password("longenough1", hashed)
        assert not verify_password("wrong", hashed)

    def test_salted(self):
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    def test_long_passwords_are_fully_significant(self):
        hashed = hash_password("x" * 100, rounds=4)
        assert verify_password("x" * 100, hashed)
        assert not verify_password("x" * 99 + "y", hashed)
        assert not verify_password("x" * 72, hashed)

    def test_garbage_hash_is_a_mismatch(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestCredentialStore:
    @pytest.mark.asyncio
    async def test_create_and_find(self, session_factory):
        async with session_factory() as session:
            store = CredentialStore(session)
            user = await store.create_account("a@x.com", "hash")
            assert user.name == "a"
            assert user.language == "en"

            found = await store.find_by_email("a@x.com")
            assert found is not None
            assert found.user_id == user.user_id

    @pytest.mark.asyncio
    async def test_email_lookup_is_case_sensitive(self, session_factory):
        async with session_factory() as session:
            store = CredentialStore(session)
            await store.create_account("a@x.com", "hash")
            assert await store.find_by_email("A@X.COM") is None

    @pytest.mark.asyncio
    async def test_explicit_name_kept(self, session_factory):
        async with session_factory() as session:
            user = await CredentialStore(session).create_account("b@x.com", "hash", name="Bea")
            assert user.name == "Bea"

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected_by_lookup(self, session_factory):
        async with session_factory() as session:
            store = CredentialStore(session)
            await store.create_account("a@x.com", "hash")
            with pytest.raises(DuplicateEmail):
                await store.create_account("a@x.com", "other")

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected_by_unique_index(self, session_factory):
        """Two registrations that both pass the lookup: the index decides."""
        async with session_factory() as session:
            await CredentialStore(session).create_account("race@x.com", "hash")

        async with session_factory() as session:
            store = CredentialStore(session)
            with patch.object(CredentialStore, "find_by_email", new=AsyncMock(return_value=None)):
                with pytest.raises(DuplicateEmail):
                    await store.create_account("race@x.com", "hash2")
            # Session is still usable after the rollback.
            assert (await store.find_by_email("race@x.com")).password_hash == "hash"

    @pytest.mark.asyncio
    async def test_find_by_id_hides_password_hash(self, session_factory):
        async with session_factory() as session:
            store = CredentialStore(session)
            user = await store.create_account("a@x.com", "secret-hash")
            profile = await store.find_by_id(str(user.user_id))

        assert profile["userId"] == str(user.user_id)
        assert profile["email"] == "a@x.com"
        assert "password_hash" not in profile
        assert "secret-hash" not in profile.values()

    @pytest.mark.asyncio
    async def test_find_by_id_unknown_or_malformed(self, session_factory):
        async with session_factory() as session:
            store = CredentialStore(session)
            assert await store.find_by_id(str(uuid.uuid4())) is None
            assert await store.find_by_id("not-a-uuid") is None

    @pytest.mark.asyncio
    async def test_skipping_lookup_still_hits_unique_index(self, session_factory):
        async with session_factory() as session:
            store = CredentialStore(session)
            await store.create_account("a@x.com", "hash")
            with patch.object(CredentialStore, "find_by_email", new=AsyncMock()) as lookup:
                with pytest.raises(DuplicateEmail):
                    await store.create_account("a@x.com", "hash2", check_existing=False)
            lookup.assert_not_called()
