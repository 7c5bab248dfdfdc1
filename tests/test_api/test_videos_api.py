"""Tests for /api/videos, /api/search, /api/suggestions and /api/studio."""

import uuid

from vidshare.common.models import VISIBILITY_PRIVATE, VISIBILITY_PUBLIC


async def _collect(client, url, **params):
    """Follow nextCursor until the listing is exhausted; returns the pages."""
    pages, cursor = [], None
    while True:
        query = dict(params, cursor=cursor) if cursor else params
        response = await client.get(url, params=query)
        assert response.status_code == 200, response.text
        body = response.json()
        pages.append(body["items"])
        cursor = body["nextCursor"]
        if cursor is None:
            return pages


class TestListVideos:
    async def test_envelope(self, client, factory):
        alice = await factory.user("Alice")
        video = await factory.video(alice, "clip")

        response = await client.get("/api/videos")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"items", "nextCursor"}
        assert body["nextCursor"] is None
        item = body["items"][0]
        assert item["id"] == str(video.id)
        assert item["user"]["name"] == "Alice"
        assert item["view_count"] == 0

    async def test_traversal(self, client, factory):
        alice = await factory.user()
        for i in range(25):
            await factory.video(alice, f"v{i:02d}")

        pages = await _collect(client, "/api/videos", limit=10)

        assert [len(p) for p in pages] == [10, 10, 5]
        titles = [item["title"] for page in pages for item in page]
        assert titles == [f"v{i:02d}" for i in reversed(range(25))]

    async def test_creator_filter(self, client, factory):
        alice = await factory.user("Alice")
        bob = await factory.user("Bob")
        await factory.video(alice, "a")
        await factory.video(bob, "b")

        response = await client.get("/api/videos", params={"user_id": str(bob.id)})

        assert [i["title"] for i in response.json()["items"]] == ["b"]

    async def test_limit_bounds(self, client):
        assert (await client.get("/api/videos", params={"limit": 0})).status_code == 422
        assert (await client.get("/api/videos", params={"limit": 101})).status_code == 422
        assert (await client.get("/api/videos", params={"limit": 100})).status_code == 200

    async def test_malformed_cursor(self, client):
        response = await client.get("/api/videos", params={"cursor": "not-a-cursor"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid cursor"

    async def test_cursor_from_another_listing(self, client, factory):
        alice = await factory.user()
        bob = await factory.user("Bob")
        for _ in range(3):
            video = await factory.video(alice)
            await factory.view(bob, video)
        trending = (await client.get("/api/videos/trending", params={"limit": 1})).json()

        response = await client.get("/api/videos", params={"cursor": trending["nextCursor"]})

        assert response.status_code == 400


class TestTrendingAndSubscribed:
    async def test_trending_order(self, client, factory):
        creator = await factory.user("Creator")
        fans = [await factory.user(f"fan{i}") for i in range(2)]
        low = await factory.video(creator, "low")
        high = await factory.video(creator, "high")
        await factory.view(fans[0], low)
        for fan in fans:
            await factory.view(fan, high)

        pages = await _collect(client, "/api/videos/trending", limit=1)

        assert [p[0]["title"] for p in pages] == ["high", "low"]

    async def test_subscribed_requires_auth(self, client):
        assert (await client.get("/api/videos/subscribed")).status_code == 401

    async def test_subscribed_feed(self, client, factory, auth_headers):
        viewer = await factory.user("Viewer")
        creator = await factory.user("Creator")
        stranger = await factory.user("Stranger")
        await factory.subscription(viewer, creator)
        await factory.video(creator, "followed")
        await factory.video(stranger, "not followed")

        response = await client.get("/api/videos/subscribed", headers=auth_headers(viewer))

        assert [i["title"] for i in response.json()["items"]] == ["followed"]


class TestSingleVideo:
    async def test_detail_with_viewer(self, client, factory, auth_headers):
        creator = await factory.user("Creator")
        viewer = await factory.user("Viewer")
        video = await factory.video(creator, "clip")
        await factory.subscription(viewer, creator)
        await factory.reaction(viewer, video)

        response = await client.get(f"/api/videos/{video.id}", headers=auth_headers(viewer))

        body = response.json()
        assert body["viewer_reaction"] == "like"
        assert body["user"]["viewer_subscribed"] is True
        assert body["user"]["subscriber_count"] == 1

    async def test_detail_not_found(self, client):
        assert (await client.get(f"/api/videos/{uuid.uuid4()}")).status_code == 404

    async def test_update_by_owner(self, client, factory, auth_headers):
        creator = await factory.user("Creator")
        video = await factory.video(creator, "draft", visibility=VISIBILITY_PRIVATE)

        response = await client.patch(
            f"/api/videos/{video.id}",
            json={"title": "final", "visibility": VISIBILITY_PUBLIC},
            headers=auth_headers(creator),
        )

        assert response.status_code == 200
        assert response.json()["title"] == "final"
        assert response.json()["visibility"] == VISIBILITY_PUBLIC

    async def test_update_rejects_bad_input(self, client, factory, auth_headers):
        creator = await factory.user("Creator")
        video = await factory.video(creator)
        headers = auth_headers(creator)

        empty = await client.patch(f"/api/videos/{video.id}", json={"title": None}, headers=headers)
        unknown = await client.patch(
            f"/api/videos/{video.id}", json={"category_id": str(uuid.uuid4())}, headers=headers
        )
        bad_visibility = await client.patch(f"/api/videos/{video.id}", json={"visibility": "unlisted"}, headers=headers)

        assert empty.status_code == 400
        assert unknown.status_code == 400
        assert bad_visibility.status_code == 422

    async def test_update_by_someone_else(self, client, factory, auth_headers):
        creator = await factory.user("Creator")
        other = await factory.user("Other")
        video = await factory.video(creator)

        response = await client.patch(f"/api/videos/{video.id}", json={"title": "x"}, headers=auth_headers(other))

        assert response.status_code == 404

    async def test_delete(self, client, factory, auth_headers):
        creator = await factory.user("Creator")
        video = await factory.video(creator)

        response = await client.delete(f"/api/videos/{video.id}", headers=auth_headers(creator))

        assert response.status_code == 200
        assert (await client.get(f"/api/videos/{video.id}")).status_code == 404

    async def test_record_view(self, client, factory, auth_headers):
        creator = await factory.user("Creator")
        viewer = await factory.user("Viewer")
        video = await factory.video(creator)

        for _ in range(2):
            response = await client.post(f"/api/videos/{video.id}/views", headers=auth_headers(viewer))
            assert response.status_code == 200

        assert (await client.get(f"/api/videos/{video.id}")).json()["view_count"] == 1


class TestSearchAndSuggestions:
    async def test_search(self, client, factory):
        alice = await factory.user()
        await factory.video(alice, "Learn Python")
        await factory.video(alice, "Learn Go")

        response = await client.get("/api/search", params={"query": "python"})

        assert [i["title"] for i in response.json()["items"]] == ["Learn Python"]

    async def test_suggestions(self, client, factory):
        alice = await factory.user()
        music = await factory.category("Music")
        current = await factory.video(alice, "current", category=music)
        await factory.video(alice, "related", category=music)

        response = await client.get("/api/suggestions", params={"video_id": str(current.id)})

        assert [i["title"] for i in response.json()["items"]] == ["related"]

    async def test_suggestions_for_missing_video(self, client):
        response = await client.get("/api/suggestions", params={"video_id": str(uuid.uuid4())})
        assert response.status_code == 404


class TestStudio:
    async def test_lists_all_own_videos(self, client, factory, auth_headers):
        creator = await factory.user("Creator")
        other = await factory.user("Other")
        await factory.video(creator, "public")
        await factory.video(creator, "draft", visibility=VISIBILITY_PRIVATE)
        await factory.video(other, "not mine")

        response = await client.get("/api/studio/videos", headers=auth_headers(creator))

        items = response.json()["items"]
        assert [i["title"] for i in items] == ["draft", "public"]
        assert all("comment_count" in i for i in items)

    async def test_single_video_must_be_owned(self, client, factory, auth_headers):
        creator = await factory.user("Creator")
        other = await factory.user("Other")
        video = await factory.video(creator)

        assert (await client.get(f"/api/studio/videos/{video.id}", headers=auth_headers(other))).status_code == 404
        assert (await client.get(f"/api/studio/videos/{video.id}", headers=auth_headers(creator))).status_code == 200


class TestCreateVideo:
    async def test_creates_private_draft_for_caller(self, client, factory, auth_headers):
        creator = await factory.user("Creator")
        headers = auth_headers(creator)

        response = await client.post("/api/videos", headers=headers)
        studio = (await client.get("/api/studio/videos", headers=headers)).json()
        public = (await client.get("/api/videos")).json()

        assert response.status_code == 201
        body = response.json()
        assert (body["title"], body["status"], body["visibility"]) == ("Untitled", "waiting", VISIBILITY_PRIVATE)
        assert body["user"]["name"] == "Creator"
        assert [i["id"] for i in studio["items"]] == [body["id"]]
        assert public["items"] == []

    async def test_requires_auth(self, client):
        assert (await client.post("/api/videos")).status_code == 401
