"""
Forum directory and following.
"""

import pytest

from forum_api.core.exceptions import (
    AlreadyFollowing,
    ForumNameTaken,
    ForumNotFound,
    NotYetFollowing,
    UsernameTaken,
)
from forum_api.modules.forum import ForumService
from forum_api.modules.users import UserService


async def test_forum_names_are_unique(make_forum):
    await make_forum("Chess")
    with pytest.raises(ForumNameTaken):
        await make_forum("Chess")


async def test_usernames_are_unique(make_user):
    await make_user("alice")
    with pytest.raises(UsernameTaken):
        await make_user("alice")


async def test_list_forums(db, make_user, make_forum):
    alice = await make_user("alice")
    await make_forum("Go", owner_id=alice.id)
    await make_forum("Chess")

    forums = ForumService(db)
    assert [f.name for f in await forums.get_forums()] == ["Chess", "Go"]
    assert [f.name for f in await forums.get_user_forums(alice.id)] == ["Go"]


async def test_get_missing_forum(db):
    with pytest.raises(ForumNotFound):
        await ForumService(db).get_forum("Nowhere")


async def test_follow_and_unfollow(db, make_user, make_forum):
    alice = await make_user("alice")
    chess = await make_forum("Chess")
    go = await make_forum("Go")
    users = UserService(db)

    await users.follow_forum(chess.id, alice.id)
    followed = await users.follow_forum(go.id, alice.id)
    assert followed == [{"forum": chess.id}, {"forum": go.id}]

    with pytest.raises(AlreadyFollowing):
        await users.follow_forum(chess.id, alice.id)

    assert await users.unfollow_forum(chess.id, alice.id) == [{"forum": go.id}]

    with pytest.raises(NotYetFollowing):
        await users.unfollow_forum(chess.id, alice.id)


async def test_follow_missing_forum(db, make_user):
    alice = await make_user("alice")
    with pytest.raises(ForumNotFound):
        await UserService(db).follow_forum("missing", alice.id)
