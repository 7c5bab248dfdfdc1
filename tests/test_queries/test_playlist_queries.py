"""Tests for playlists, watch history and liked videos."""

from vidshare.common.models import REACTION_DISLIKE, VISIBILITY_PRIVATE
from vidshare.queries import playlists, videos


def _titles(page) -> list[str]:
    return [row.Video.title for row in page.items]


class TestPlaylists:
    async def test_list_with_counts_and_cover(self, db_session, factory):
        alice = await factory.user("Alice")
        bob = await factory.user("Bob")
        empty = await factory.playlist(alice, "Empty")
        full = await factory.playlist(alice, "Full")
        await factory.playlist(bob, "Bob's")
        older = await factory.video(alice, "older", thumbnail_url="older.jpg")
        newer = await factory.video(alice, "newer", thumbnail_url="newer.jpg")
        await factory.playlist_video(full, older)
        await factory.playlist_video(full, newer)

        page = await playlists.list_playlists(db_session, alice.id, limit=10)
        items = [playlists.playlist_item(row) for row in page.items]

        assert [i.name for i in items] == ["Full", "Empty"]
        assert [i.video_count for i in items] == [2, 0]
        assert items[0].thumbnail_url == "newer.jpg"
        assert items[1].thumbnail_url is None
        assert items[1].id == empty.id

    async def test_for_video_flags_membership(self, db_session, factory):
        alice = await factory.user("Alice")
        video = await factory.video(alice)
        has_it = await factory.playlist(alice, "Has it")
        await factory.playlist(alice, "Lacks it")
        await factory.playlist_video(has_it, video)

        page = await playlists.list_playlists_for_video(db_session, alice.id, video.id, limit=10)
        flags = {i.name: i.contains_video for i in map(playlists.membership_item, page.items)}

        assert flags == {"Has it": True, "Lacks it": False}

    async def test_videos_most_recently_added_first(self, db_session, factory):
        alice = await factory.user("Alice")
        playlist = await factory.playlist(alice)
        a = await factory.video(alice, "a")
        b = await factory.video(alice, "b")
        c = await factory.video(alice, "c")
        await factory.playlist_video(playlist, b)
        await factory.playlist_video(playlist, a)
        await factory.playlist_video(playlist, c)

        first = await playlists.list_playlist_videos(db_session, playlist.id, limit=2)
        second = await playlists.list_playlist_videos(db_session, playlist.id, limit=2, cursor=first.next_cursor)

        assert _titles(first) == ["c", "a"]
        assert _titles(second) == ["b"]
        assert set(first.next_cursor.values) == {"addedAt", "videoId"}

    async def test_add_get_remove_entry(self, db_session, factory):
        alice = await factory.user("Alice")
        playlist = await factory.playlist(alice)
        video = await factory.video(alice)

        await playlists.add_video(db_session, playlist.id, video.id)
        entry = await playlists.get_entry(db_session, playlist.id, video.id)
        await playlists.remove_video(db_session, entry)

        assert entry is not None
        assert await playlists.get_entry(db_session, playlist.id, video.id) is None

    async def test_owned_lookup_and_detail(self, db_session, factory):
        alice = await factory.user("Alice")
        bob = await factory.user("Bob")

        playlist = await playlists.create_playlist(db_session, alice.id, "Mine", "desc")

        assert await playlists.get_owned_playlist(db_session, playlist.id, bob.id) is None
        assert (await playlists.get_playlist_detail(db_session, playlist.id, alice.id)).description == "desc"
        await playlists.delete_playlist(db_session, playlist)
        assert await playlists.get_owned_playlist(db_session, playlist.id, alice.id) is None


class TestHistory:
    async def test_ordered_by_first_watch_newest_first(self, db_session, factory):
        viewer = await factory.user("Viewer")
        creator = await factory.user("Creator")
        a = await factory.video(creator, "a")
        b = await factory.video(creator, "b")
        await factory.view(viewer, b)
        await factory.view(viewer, a)
        await factory.view(creator, b)

        page = await playlists.list_history(db_session, viewer.id, limit=10)

        assert _titles(page) == ["a", "b"]
        assert set(page.items[0]._mapping) >= {"viewed_at", "view_count"}

    async def test_repeat_view_keeps_first_watch_position(self, db_session, factory):
        viewer = await factory.user("Viewer")
        creator = await factory.user("Creator")
        a = await factory.video(creator, "a")
        b = await factory.video(creator, "b")
        await factory.view(viewer, a)
        await factory.view(viewer, b)

        await videos.record_view(db_session, a.id, viewer.id)
        page = await playlists.list_history(db_session, viewer.id, limit=10)

        assert _titles(page) == ["b", "a"]

    async def test_hides_others_private_videos(self, db_session, factory):
        viewer = await factory.user("Viewer")
        creator = await factory.user("Creator")
        hidden = await factory.video(creator, "hidden", visibility=VISIBILITY_PRIVATE)
        own = await factory.video(viewer, "own draft", visibility=VISIBILITY_PRIVATE)
        await factory.view(viewer, hidden)
        await factory.view(viewer, own)

        page = await playlists.list_history(db_session, viewer.id, limit=10)

        assert _titles(page) == ["own draft"]


class TestLiked:
    async def test_only_likes(self, db_session, factory):
        viewer = await factory.user("Viewer")
        creator = await factory.user("Creator")
        liked = await factory.video(creator, "liked")
        disliked = await factory.video(creator, "disliked")
        also_liked = await factory.video(creator, "also liked")
        await factory.reaction(viewer, liked)
        await factory.reaction(viewer, disliked, REACTION_DISLIKE)
        await factory.reaction(viewer, also_liked)

        first = await playlists.list_liked(db_session, viewer.id, limit=1)
        second = await playlists.list_liked(db_session, viewer.id, limit=1, cursor=first.next_cursor)

        assert _titles(first) == ["also liked"]
        assert _titles(second) == ["liked"]
        assert second.next_cursor is None
