"""Tests for user lookups and category seeding."""

from vidshare.queries import categories, users


class TestUsers:
    async def test_get_or_create_is_idempotent(self, db_session):
        created = await users.get_or_create_user(db_session, "auth_123", "Alice")
        again = await users.get_or_create_user(db_session, "auth_123", "Someone else")

        assert again.id == created.id
        assert again.name == "Alice"

    async def test_lookup_by_auth_id(self, db_session, factory):
        alice = await factory.user("Alice", auth_id="auth_alice")

        assert (await users.get_user_by_auth_id(db_session, "auth_alice")).id == alice.id
        assert await users.get_user_by_auth_id(db_session, "auth_nobody") is None
        assert (await users.get_user(db_session, alice.id)).name == "Alice"


class TestCategories:
    async def test_seed_defaults_once(self, db_session):
        added = await categories.seed_categories(db_session)
        again = await categories.seed_categories(db_session)

        listed = await categories.list_categories(db_session)
        assert added == len(categories.DEFAULT_CATEGORIES)
        assert again == 0
        assert [c.name for c in listed] == sorted(categories.DEFAULT_CATEGORIES)

    async def test_seed_skips_existing(self, db_session, factory):
        await factory.category("Music")

        added = await categories.seed_categories(db_session, ["Music", "Gaming", "Gaming"])

        assert added == 1
        assert [c.name for c in await categories.list_categories(db_session)] == ["Gaming", "Music"]
