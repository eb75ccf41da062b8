"""
Tests for the link store, slug generator and link service.

Runs against the temporary SQLite database configured in conftest.
"""

import pytest
import pytest_asyncio

from shortbox.core.slugs import RESERVED_SLUGS, validate_assigned_slug
from shortbox.db.session import async_session_maker, init_models
from shortbox.services import slug_generator
from shortbox.services.link_service import ClientInfo, LinkService, SlugTakenError, format_record
from shortbox.services.link_store import LinkStore
from shortbox.services.slug_generator import SLUG_ALPHABET, generate_code, generate_unique_slug

CLIENT = ClientInfo(ip="203.0.113.9", user_agent="pytest", country="NZ")


@pytest_asyncio.fixture
async def store(empty_links_table):
    await init_models()
    async with async_session_maker() as session:
        yield LinkStore(session)


@pytest_asyncio.fixture
async def service(store):
    return LinkService(store)


class TestLinkStore:
    @pytest.mark.asyncio
    async def test_put_get_roundtrip(self, store):
        await store.put("abc", {"url": "https://example.com/", "slug": "abc"})
        assert await store.get("abc") == {"url": "https://example.com/", "slug": "abc"}
        assert await store.exists("abc")

    @pytest.mark.asyncio
    async def test_missing_key(self, store):
        assert await store.get("nope") is None
        assert not await store.exists("nope")

    @pytest.mark.asyncio
    async def test_put_overwrites(self, store):
        await store.put("abc", {"v": 1})
        await store.put("abc", {"v": 2})
        assert await store.get("abc") == {"v": 2}

    @pytest.mark.asyncio
    async def test_delete_missing_key_is_fine(self, store):
        await store.delete("never-existed")

    @pytest.mark.asyncio
    async def test_list_pages_with_cursor(self, store):
        for key in ["d", "a", "c", "b", "e"]:
            await store.put(key, {"slug": key})

        first = await store.list(limit=2)
        assert first.keys == ["a", "b"]
        assert not first.list_complete

        second = await store.list(cursor=first.cursor, limit=2)
        assert second.keys == ["c", "d"]

        third = await store.list(cursor=second.cursor, limit=2)
        assert third.keys == ["e"]
        assert third.list_complete


class TestSlugGenerator:
    def test_generate_code_uses_alphabet(self):
        code = generate_code(12)
        assert len(code) == 12
        assert set(code) <= set(SLUG_ALPHABET)

    @pytest.mark.asyncio
    async def test_unique_slug_passes_policy(self, store):
        slug = await generate_unique_slug(store, length=4)
        assert len(slug) == 4
        assert validate_assigned_slug(slug).ok
        assert slug not in RESERVED_SLUGS

    @pytest.mark.asyncio
    async def test_skips_reserved_words(self, store, monkeypatch):
        codes = iter(["ping", "api", "zz9x"])
        monkeypatch.setattr(slug_generator, "generate_code", lambda length: next(codes))
        assert await generate_unique_slug(store, length=4) == "zz9x"

    @pytest.mark.asyncio
    async def test_skips_route_prefixed_codes(self, store, monkeypatch):
        codes = iter(["api0", "apiz", "zz9x"])
        monkeypatch.setattr(slug_generator, "generate_code", lambda length: next(codes))
        assert await generate_unique_slug(store, length=4) == "zz9x"

    @pytest.mark.asyncio
    async def test_grows_after_collisions(self, store, monkeypatch):
        await store.put("aaaa", {"slug": "aaaa"})
        await store.put("aaaaa", {"slug": "aaaaa"})
        monkeypatch.setattr(slug_generator, "generate_code", lambda length: "a" * length)

        slug = await generate_unique_slug(store, length=4, max_retries=8)
        assert slug == "aaaaaa"


class TestLinkService:
    @pytest.mark.asyncio
    async def test_shorten_generates_slug(self, service, store):
        record = await service.shorten("https://example.com/", CLIENT)
        assert record["url"] == "https://example.com/"
        assert record["ip"] == "203.0.113.9"
        assert record["country"] == "NZ"
        assert record["createdAt"].endswith("Z")
        assert await store.get(record["slug"]) == record

    @pytest.mark.asyncio
    async def test_shorten_custom_slug(self, service):
        record = await service.shorten("https://example.com/", CLIENT, custom_slug="my-link")
        assert record["slug"] == "my-link"

    @pytest.mark.asyncio
    async def test_custom_slug_taken(self, service):
        await service.shorten("https://example.com/", CLIENT, custom_slug="taken")
        with pytest.raises(SlugTakenError) as exc_info:
            await service.shorten("https://example.org/", CLIENT, custom_slug="taken")
        assert exc_info.value.slug == "taken"
        assert (await service.lookup("taken"))["url"] == "https://example.com/"

    @pytest.mark.asyncio
    async def test_user_agent_truncated(self, service):
        client = ClientInfo(ip="", user_agent="u" * 2000, country="")
        record = await service.shorten("https://example.com/", client)
        assert len(record["userAgent"]) == 512

    @pytest.mark.asyncio
    async def test_lookup_many_keeps_order(self, service):
        for slug in ["one", "two", "three"]:
            await service.shorten(f"https://example.com/{slug}", CLIENT, custom_slug=slug)

        found, not_found = await service.lookup_many(["three", "missing", "one"])
        assert [record["slug"] for record in found] == ["three", "one"]
        assert not_found == ["missing"]

    @pytest.mark.asyncio
    async def test_list_and_purge(self, service):
        for slug in ["aa", "bb", "cc"]:
            await service.shorten("https://example.com/", CLIENT, custom_slug=slug)

        links = await service.list_all()
        assert sorted(record["slug"] for record in links) == ["aa", "bb", "cc"]

        assert await service.purge() == 3
        assert await service.list_all() == []

    @pytest.mark.asyncio
    async def test_delete(self, service):
        await service.shorten("https://example.com/", CLIENT, custom_slug="gone")
        await service.delete("gone")
        assert await service.lookup("gone") is None


class TestFormatRecord:
    RECORD = {
        "url": "https://example.com/",
        "slug": "abc",
        "ip": "203.0.113.9",
        "userAgent": "pytest",
        "country": "",
        "createdAt": "2026-10-18T00:00:00.000Z",
    }

    def test_public_view_hides_client_details(self):
        output = format_record(self.RECORD, "https://sho.rt", include_private=False)
        assert output["shortUrl"] == "https://sho.rt/abc"
        assert output["country"] is None
        assert "ip" not in output
        assert "userAgent" not in output

    def test_admin_view_includes_client_details(self):
        output = format_record(self.RECORD, "https://sho.rt", include_private=True)
        assert output["ip"] == "203.0.113.9"
        assert output["userAgent"] == "pytest"
