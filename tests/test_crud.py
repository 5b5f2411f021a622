"""
Data-access tests against the in-process fake connection: row shaping,
toggle semantics, set semantics and transactional cascades.
"""

import uuid

import psycopg
import pytest

from app.crud import comments as comment_crud
from app.crud import likes as like_crud
from app.crud import playlists as playlist_crud
from app.crud import subscriptions as subscription_crud
from app.crud import tweets as tweet_crud
from app.crud import users as user_crud
from app.crud import videos as video_crud
from app.crud.common import nest, wrap
from app.errors import ConflictError
from conftest import NOW, OTHER_USER_ID, USER_ID, FakeConnection


class TestNest:
    def test_folds_prefixed_columns(self):
        row = {"id": 1, "owner__id": 7, "owner__username": "alice"}
        assert nest(row, "owner") == {"id": 1, "owner": {"id": 7, "username": "alice"}}

    def test_left_join_miss_becomes_none(self):
        row = {"id": 1, "latest_video__id": None, "latest_video__title": None}
        assert nest(row, "latest_video") == {"id": 1, "latest_video": None}

    def test_wrap(self):
        assert wrap([{"id": 1}], "subscriber") == [{"subscriber": {"id": 1}}]


class TestToggleLike:
    @staticmethod
    def like_store():
        likes = set()

        def handler(query, params):
            if query.startswith("DELETE FROM likes"):
                if tuple(params) in likes:
                    likes.remove(tuple(params))
                    return [(1,)]
                return []
            if query.startswith("INSERT INTO likes"):
                likes.add(tuple(params))
            return []

        return likes, handler

    @pytest.mark.asyncio
    @pytest.mark.parametrize("toggles", [1, 2, 3, 4, 5])
    async def test_row_exists_after_odd_number_of_toggles(self, toggles):
        likes, handler = self.like_store()
        conn = FakeConnection(handler=handler)
        video_id = uuid.uuid4()

        states = [await like_crud.toggle_like(conn, "video", video_id, USER_ID) for _ in range(toggles)]

        assert states == [i % 2 == 0 for i in range(toggles)]
        assert ((video_id, USER_ID) in likes) == (toggles % 2 == 1)

    @pytest.mark.asyncio
    async def test_uses_the_target_column(self):
        conn = FakeConnection()
        await like_crud.toggle_like(conn, "tweet", uuid.uuid4(), USER_ID)

        delete, insert = conn.statements()
        assert "tweet_id = %s AND liked_by = %s" in delete
        assert insert.startswith("INSERT INTO likes (tweet_id, liked_by)")
        assert "ON CONFLICT DO NOTHING" in insert
        assert conn.events == ["BEGIN", "COMMIT"]


class TestToggleSubscription:
    @pytest.mark.asyncio
    async def test_subscribe_then_unsubscribe(self):
        conn = FakeConnection(responses=[[], [], [(1,)]])
        channel_id = uuid.uuid4()

        assert await subscription_crud.toggle_subscription(conn, USER_ID, channel_id) is True
        assert await subscription_crud.toggle_subscription(conn, USER_ID, channel_id) is False
        assert len(conn.executed) == 3
        assert conn.executed[0][1] == (USER_ID, channel_id)


class TestCascadeDeletes:
    @pytest.mark.asyncio
    async def test_video_delete_removes_likes_and_comments_in_one_transaction(self):
        video_id = uuid.uuid4()
        conn = FakeConnection(responses=[[], [], [], [(1,)]])

        assert await video_crud.delete_video(conn, video_id) is True

        statements = conn.statements()
        assert statements[0].startswith("DELETE FROM likes WHERE comment_id IN")
        assert statements[1] == "DELETE FROM comments WHERE video_id = %s"
        assert statements[2] == "DELETE FROM likes WHERE video_id = %s"
        assert statements[3] == "DELETE FROM videos WHERE id = %s"
        assert all(params == (video_id,) for _, params in conn.executed)
        assert conn.events == ["BEGIN", "COMMIT"]

    @pytest.mark.asyncio
    async def test_comment_delete_removes_its_likes(self):
        comment_id = uuid.uuid4()
        conn = FakeConnection(responses=[[], [(1,)]])

        assert await comment_crud.delete_comment(conn, comment_id) is True
        assert conn.statements() == [
            "DELETE FROM likes WHERE comment_id = %s",
            "DELETE FROM comments WHERE id = %s",
        ]
        assert conn.events == ["BEGIN", "COMMIT"]

    @pytest.mark.asyncio
    async def test_tweet_delete_reports_missing_row(self):
        conn = FakeConnection(responses=[[], []])
        assert await tweet_crud.delete_tweet(conn, uuid.uuid4()) is False


class TestPlaylistSetSemantics:
    @staticmethod
    def playlist_store(playlist_id):
        entries = []

        def handler(query, params):
            if query.startswith("INSERT INTO playlist_videos"):
                if tuple(params) in entries:
                    return []
                entries.append(tuple(params))
                return [()]
            if query.startswith("DELETE FROM playlist_videos"):
                if tuple(params) in entries:
                    entries.remove(tuple(params))
                    return [()]
                return []
            if query.startswith("SELECT p.id"):
                return [{
                    "id": playlist_id,
                    "name": "Mix",
                    "description": "Songs",
                    "owner_id": USER_ID,
                    "created_at": NOW,
                    "updated_at": NOW,
                    "videos": [video for _, video in entries],
                }]
            return []

        return entries, handler

    @pytest.mark.asyncio
    async def test_adding_twice_keeps_one_entry(self):
        playlist_id, video_id = uuid.uuid4(), uuid.uuid4()
        entries, handler = self.playlist_store(playlist_id)
        conn = FakeConnection(handler=handler)

        await playlist_crud.add_video(conn, playlist_id, video_id)
        playlist = await playlist_crud.add_video(conn, playlist_id, video_id)

        assert playlist["videos"] == [video_id]
        assert len(entries) == 1

    @pytest.mark.asyncio
    async def test_removing_absent_video_is_a_no_op(self):
        playlist_id = uuid.uuid4()
        _, handler = self.playlist_store(playlist_id)
        conn = FakeConnection(handler=handler)

        playlist = await playlist_crud.remove_video(conn, playlist_id, uuid.uuid4())

        assert playlist["videos"] == []
        assert not any(q.startswith("UPDATE playlists") for q in conn.statements())


class TestReadModels:
    @pytest.mark.asyncio
    async def test_video_view_for_anonymous_caller(self):
        video_id = uuid.uuid4()
        conn = FakeConnection(responses=[[{
            "id": video_id,
            "title": "Intro",
            "views": 3,
            "likes_count": 0,
            "is_liked": False,
            "owner__id": OTHER_USER_ID,
            "owner__username": "bob",
            "owner__avatar_url": None,
            "owner__subscribers_count": 0,
            "owner__is_subscribed": False,
        }]])

        view = await video_crud.get_video_view(conn, video_id, None)

        _, params = conn.executed[0]
        assert params == {"video_id": video_id, "actor": None}
        assert view["likes_count"] == 0
        assert view["is_liked"] is False
        assert view["owner"] == {
            "id": OTHER_USER_ID,
            "username": "bob",
            "avatar_url": None,
            "subscribers_count": 0,
            "is_subscribed": False,
        }

    @pytest.mark.asyncio
    async def test_missing_video_view_is_none(self):
        conn = FakeConnection()
        assert await video_crud.get_video_view(conn, uuid.uuid4(), USER_ID) is None

    @pytest.mark.asyncio
    async def test_list_videos_builds_filters(self):
        conn = FakeConnection()
        await video_crud.list_videos(conn, 10, 20, query="cats", sort_by="views", sort_type="asc", owner_id=USER_ID)

        query, params = conn.executed[0]
        assert "v.is_published" in query
        assert "ILIKE" in query
        assert "ORDER BY v.views ASC" in query
        assert params == [USER_ID, "%cats%", "%cats%", 10, 20]

    @pytest.mark.asyncio
    async def test_user_tweets_newest_first_with_owner_details(self):
        conn = FakeConnection(responses=[[{
            "id": uuid.uuid4(),
            "content": "hello",
            "created_at": NOW,
            "likes_count": 2,
            "is_liked": True,
            "owner_details__username": "alice",
            "owner_details__avatar_url": None,
        }]])

        tweets = await tweet_crud.get_user_tweets(conn, USER_ID, USER_ID, 10, 0)

        query, _ = conn.executed[0]
        assert "ORDER BY t.created_at DESC" in query
        assert tweets[0]["owner_details"] == {"username": "alice", "avatar_url": None}

    @pytest.mark.asyncio
    async def test_liked_videos_are_wrapped(self):
        conn = FakeConnection(responses=[[{
            "id": uuid.uuid4(),
            "title": "Clip",
            "owner_details__username": "bob",
            "owner_details__full_name": "Bob",
            "owner_details__avatar_url": None,
        }]])

        liked = await like_crud.get_liked_videos(conn, USER_ID, 10, 0)

        assert liked[0]["liked_video"]["title"] == "Clip"
        assert liked[0]["liked_video"]["owner_details"]["username"] == "bob"

    @pytest.mark.asyncio
    async def test_subscribed_channels_without_videos(self):
        conn = FakeConnection(responses=[[{
            "id": OTHER_USER_ID,
            "username": "bob",
            "full_name": "Bob",
            "avatar_url": None,
            "latest_video__id": None,
            "latest_video__title": None,
        }]])

        channels = await subscription_crud.get_subscribed_channels(conn, USER_ID, 10, 0)

        assert channels == [{"subscribed_channel": {
            "id": OTHER_USER_ID,
            "username": "bob",
            "full_name": "Bob",
            "avatar_url": None,
            "latest_video": None,
        }}]

    @pytest.mark.asyncio
    async def test_playlist_view_embeds_videos_and_owner(self):
        playlist_id = uuid.uuid4()
        conn = FakeConnection(responses=[
            [{
                "id": playlist_id,
                "name": "Mix",
                "total_videos": 0,
                "total_views": 0,
                "owner__username": "alice",
                "owner__full_name": "Alice",
                "owner__avatar_url": None,
            }],
            [],
        ])

        view = await playlist_crud.get_playlist_view(conn, playlist_id)

        assert view["videos"] == []
        assert view["total_views"] == 0
        assert view["owner"]["username"] == "alice"

    @pytest.mark.asyncio
    async def test_user_playlists_count_published_videos_only(self):
        playlist_id = uuid.uuid4()
        conn = FakeConnection(responses=[[{
            "id": playlist_id,
            "name": "Empty",
            "description": "Nothing yet",
            "updated_at": NOW,
            "total_videos": 0,
            "total_views": 0,
        }]])

        playlists = await playlist_crud.get_user_playlists(conn, USER_ID, 10, 0)

        query, params = conn.executed[0]
        assert "LEFT JOIN videos v ON v.id = pv.video_id AND v.is_published" in query
        assert "COALESCE(SUM(v.views), 0) AS total_views" in query
        assert "ORDER BY p.updated_at DESC" in query
        assert params == (USER_ID, 10, 0)
        assert (playlists[0]["total_videos"], playlists[0]["total_views"]) == (0, 0)

    @pytest.mark.asyncio
    async def test_video_comments_carry_like_stats(self):
        video_id = uuid.uuid4()
        conn = FakeConnection(responses=[[{
            "id": uuid.uuid4(),
            "content": "nice",
            "created_at": NOW,
            "updated_at": NOW,
            "likes_count": 3,
            "is_liked": True,
            "owner__id": OTHER_USER_ID,
            "owner__username": "bob",
            "owner__full_name": "Bob",
            "owner__avatar_url": None,
        }]])

        comments = await comment_crud.get_video_comments(conn, video_id, USER_ID, 10, 0)

        query, params = conn.executed[0]
        assert "ORDER BY c.created_at DESC" in query
        assert params == {"video_id": video_id, "actor": USER_ID, "limit": 10, "offset": 0}
        assert comments[0]["likes_count"] == 3
        assert comments[0]["is_liked"] is True
        assert comments[0]["owner"]["username"] == "bob"


class TestUsers:
    @pytest.mark.asyncio
    async def test_create_user_returns_public_columns(self):
        conn = FakeConnection(responses=[[{"id": USER_ID, "username": "alice"}]])

        user = await user_crud.create_user(conn, "alice", "alice@example.com", "Alice", "hashed")

        query, params = conn.executed[0]
        assert "hashed_password" not in query.split("RETURNING")[1]
        assert params == ("alice", "alice@example.com", "Alice", "hashed")
        assert user["username"] == "alice"

    @pytest.mark.asyncio
    async def test_duplicate_username_is_a_conflict(self):
        def handler(query, params):
            raise psycopg.errors.UniqueViolation('duplicate key value violates unique constraint "users_username_key"')

        conn = FakeConnection(handler=handler)

        with pytest.raises(ConflictError) as exc_info:
            await user_crud.create_user(conn, "alice", "alice@example.com", "Alice", "hashed")
        assert exc_info.value.message == "Username already exists"

    @pytest.mark.asyncio
    async def test_rewatching_keeps_one_history_entry(self):
        history = {}

        def handler(query, params):
            if query.startswith("INSERT INTO watch_history"):
                history[tuple(params)] = len(history)
            return []

        conn = FakeConnection(handler=handler)
        video_id = uuid.uuid4()

        await user_crud.add_to_watch_history(conn, USER_ID, video_id)
        await user_crud.add_to_watch_history(conn, USER_ID, video_id)

        assert list(history) == [(USER_ID, video_id)]
        assert "ON CONFLICT (user_id, video_id) DO UPDATE SET watched_at = now()" in conn.statements()[0]

    @pytest.mark.asyncio
    async def test_watch_history_most_recent_first(self):
        conn = FakeConnection(responses=[[{
            "id": uuid.uuid4(),
            "title": "Clip",
            "watched_at": NOW,
            "owner__id": OTHER_USER_ID,
            "owner__username": "bob",
            "owner__full_name": "Bob",
            "owner__avatar_url": None,
        }]])

        history = await user_crud.get_watch_history(conn, USER_ID, 10, 0)

        query, params = conn.executed[0]
        assert "ORDER BY h.watched_at DESC" in query
        assert params == (USER_ID, 10, 0)
        assert history[0]["owner"]["username"] == "bob"
