"""
Post lifecycle and the forum/post reference list.
"""

import asyncio

import pytest
from loguru import logger

from forum_api.core.config import settings
from forum_api.core.database import async_session_maker
from forum_api.core.exceptions import (
    ConcurrentUpdate,
    ForumNotFound,
    PostNotFound,
    StoreUnavailable,
    Unauthorized,
)
from forum_api.core.store import EntityStore
from forum_api.models.forum import Forum, Post
from forum_api.modules.forum import ForumService, PostService


async def _reload(kind, entity_id):
    async with async_session_maker() as session:
        return await EntityStore(session).get_by_id(kind, entity_id)


async def test_create_post_links_forum_at_front(db, make_user, make_forum):
    alice = await make_user("alice")
    chess = await make_forum("Chess")
    posts = PostService(db)

    first = await posts.create_post(chess.id, alice.id, "Opening theory", "e4 is strong")
    second = await posts.create_post(chess.id, alice.id, "Endgames", "Learn K+P")

    forum = await _reload(Forum, chess.id)
    assert forum.posts == [{"post": second.id}, {"post": first.id}]

    assert first.forum == chess.id
    assert first.forum_name == "Chess"
    assert first.username == "alice"
    assert first.likes == []
    assert first.comments == []


async def test_create_post_in_missing_forum(db, make_user):
    alice = await make_user("alice")

    with pytest.raises(ForumNotFound):
        await PostService(db).create_post("nope", alice.id, "t", "x")

    assert await PostService(db).list_posts() == []


async def test_forum_name_is_a_snapshot(db, make_user, make_forum):
    alice = await make_user("alice")
    chess = await make_forum("Chess")
    post = await PostService(db).create_post(chess.id, alice.id, "t", "x")

    chess.name = "Chess960"
    await EntityStore(db).replace(chess)

    stored = await _reload(Post, post.id)
    assert stored.forum_name == "Chess"


async def test_list_forum_posts(db, make_user, make_forum):
    alice = await make_user("alice")
    chess = await make_forum("Chess")
    go = await make_forum("Go")
    posts = PostService(db)

    older = await posts.create_post(chess.id, alice.id, "a", "x")
    await posts.create_post(go.id, alice.id, "b", "x")
    newer = await posts.create_post(chess.id, alice.id, "c", "x")

    result = await posts.list_forum_posts("Chess")
    assert [p.id for p in result] == [newer.id, older.id]

    with pytest.raises(ForumNotFound):
        await posts.list_forum_posts("Checkers")


async def test_recent_posts_limit(db, make_user, make_forum):
    alice = await make_user("alice")
    chess = await make_forum("Chess")
    posts = PostService(db)
    for i in range(4):
        await posts.create_post(chess.id, alice.id, f"post {i}", "x")

    recent = await posts.list_recent_posts(limit=3)
    assert [p.title for p in recent] == ["post 3", "post 2", "post 1"]
    assert len(await posts.list_posts()) == 4


async def test_delete_post_by_owner(db, make_user, make_forum):
    alice = await make_user("alice")
    chess = await make_forum("Chess")
    posts = PostService(db)
    keep = await posts.create_post(chess.id, alice.id, "keep", "x")
    drop = await posts.create_post(chess.id, alice.id, "drop", "x")

    await posts.delete_post(drop.id, alice.id)

    assert await _reload(Post, drop.id) is None
    forum = await _reload(Forum, chess.id)
    assert forum.posts == [{"post": keep.id}]
    with pytest.raises(PostNotFound):
        await PostService(db).get_post(drop.id)


async def test_delete_post_by_other_user_changes_nothing(db, make_user, make_forum):
    alice = await make_user("alice")
    bob = await make_user("bob")
    chess = await make_forum("Chess")
    post = await PostService(db).create_post(chess.id, alice.id, "t", "x")

    with pytest.raises(Unauthorized):
        await PostService(db).delete_post(post.id, bob.id)

    assert await _reload(Post, post.id) is not None
    forum = await _reload(Forum, chess.id)
    assert forum.posts == [{"post": post.id}]


async def test_delete_missing_post(db, make_user):
    alice = await make_user("alice")
    with pytest.raises(PostNotFound):
        await PostService(db).delete_post("missing", alice.id)


async def test_failed_forum_write_leaves_orphan_post(db, make_user, make_forum, monkeypatch):
    alice = await make_user("alice")
    chess = await make_forum("Chess")
    posts = PostService(db)
    original_replace = posts.store.replace

    async def failing_replace(entity):
        if isinstance(entity, Forum):
            raise StoreUnavailable()
        await original_replace(entity)

    monkeypatch.setattr(posts.store, "replace", failing_replace)

    with pytest.raises(StoreUnavailable):
        await posts.create_post(chess.id, alice.id, "orphan", "x")

    async with async_session_maker() as session:
        orphans = await EntityStore(session).find_by(Post, "forum", chess.id)
        forum = await EntityStore(session).get_by_id(Forum, chess.id)
    assert [p.title for p in orphans] == ["orphan"]
    assert forum.posts == []


async def test_dangling_reference_is_skipped(db, make_user, make_forum):
    alice = await make_user("alice")
    chess = await make_forum("Chess")
    posts = PostService(db)
    kept = await posts.create_post(chess.id, alice.id, "kept", "x")
    gone = await posts.create_post(chess.id, alice.id, "gone", "x")

    # Post deleted without the second write reaching the forum
    await posts.store.delete(gone)

    warnings = []
    handler_id = logger.add(warnings.append, level="WARNING", format="{message}")
    try:
        forum, resolved = await ForumService(db).get_forum("Chess")
    finally:
        logger.remove(handler_id)

    assert {"post": gone.id} in forum.posts
    assert [p.id for p in resolved] == [kept.id]
    assert any(gone.id in message for message in warnings)


async def test_delete_post_of_vanished_forum(db, make_user, make_forum):
    alice = await make_user("alice")
    chess = await make_forum("Chess")
    posts = PostService(db)
    post = await posts.create_post(chess.id, alice.id, "t", "x")
    await posts.store.delete(chess)

    await posts.delete_post(post.id, alice.id)

    assert await _reload(Post, post.id) is None


# ==================== Concurrent forum writes ====================


def _post_before_first_forum_write(store, forum_id, user_id, created):
    """Wrap ``store.replace`` so another session posts into the forum first."""
    original_replace = store.replace

    async def replace(entity):
        if isinstance(entity, Forum) and not created:
            async with async_session_maker() as other:
                post = await PostService(other).create_post(forum_id, user_id, "rival", "x")
                created.append(post.id)
        await original_replace(entity)

    return replace


async def test_create_post_relinks_after_concurrent_forum_write(
    db, make_user, make_forum, monkeypatch
):
    alice_id = (await make_user("alice")).id
    bob_id = (await make_user("bob")).id
    chess_id = (await make_forum("Chess")).id
    posts = PostService(db)
    rival = []
    monkeypatch.setattr(
        posts.store,
        "replace",
        _post_before_first_forum_write(posts.store, chess_id, bob_id, rival),
    )

    mine = await posts.create_post(chess_id, alice_id, "mine", "x")

    assert mine.title == "mine"
    forum = await _reload(Forum, chess_id)
    assert forum.posts == [{"post": mine.id}, {"post": rival[0]}]


async def test_delete_post_unlinks_after_concurrent_forum_write(
    db, make_user, make_forum, monkeypatch
):
    alice_id = (await make_user("alice")).id
    bob_id = (await make_user("bob")).id
    chess_id = (await make_forum("Chess")).id
    posts = PostService(db)
    keep_id = (await posts.create_post(chess_id, alice_id, "keep", "x")).id
    drop_id = (await posts.create_post(chess_id, alice_id, "drop", "x")).id
    rival = []
    monkeypatch.setattr(
        posts.store,
        "replace",
        _post_before_first_forum_write(posts.store, chess_id, bob_id, rival),
    )

    await posts.delete_post(drop_id, alice_id)

    assert await _reload(Post, drop_id) is None
    forum = await _reload(Forum, chess_id)
    assert forum.posts == [{"post": rival[0]}, {"post": keep_id}]


async def test_forum_write_conflict_after_last_attempt(
    db, make_user, make_forum, monkeypatch
):
    alice_id = (await make_user("alice")).id
    bob_id = (await make_user("bob")).id
    chess_id = (await make_forum("Chess")).id
    posts = PostService(db)
    rival = []
    monkeypatch.setattr(settings, "forum_write_attempts", 1)
    monkeypatch.setattr(
        posts.store,
        "replace",
        _post_before_first_forum_write(posts.store, chess_id, bob_id, rival),
    )

    with pytest.raises(ConcurrentUpdate):
        await posts.create_post(chess_id, alice_id, "mine", "x")

    forum = await _reload(Forum, chess_id)
    assert forum.posts == [{"post": rival[0]}]


async def test_simultaneous_posts_are_all_linked(make_user, make_forum):
    alice_id = (await make_user("alice")).id
    bob_id = (await make_user("bob")).id
    chess_id = (await make_forum("Chess")).id

    async def write(user_id, title):
        async with async_session_maker() as session:
            post = await PostService(session).create_post(chess_id, user_id, title, "x")
            return post.id

    created = await asyncio.gather(write(alice_id, "a"), write(bob_id, "b"))

    forum = await _reload(Forum, chess_id)
    assert sorted(ref["post"] for ref in forum.posts) == sorted(created)
    async with async_session_maker() as session:
        stored = await EntityStore(session).find_by(Post, "forum", chess_id)
    assert len(stored) == 2
