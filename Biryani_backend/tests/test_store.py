"""
PostStore tests - tallies, upserts, ordering and degraded modes.
"""
from schemas.post import PostCreate, PostResponse
from app.services.store import StoreStatus


async def test_create_post_returns_zero_tallies(store):
    result = await store.create_post(PostCreate(id="p1", user_id="u1", place_name="Test Mosque", description="biriyani"))

    assert result.status is StoreStatus.OK
    assert result.value.true_votes == 0
    assert result.value.false_votes == 0
    assert result.value.user_name == "Anonymous User"
    assert result.value.created_at is not None


async def test_create_post_generates_id_and_user_when_missing(store, count_rows):
    result = await store.create_post(PostCreate(place_name="Kacchi corner"))

    assert result.ok
    assert result.value.id
    assert result.value.user_id == "anonymous"
    assert count_rows("users", "id = ?", ("anonymous",)) == 1


async def test_create_post_keeps_existing_user(store, count_rows):
    await store.create_post(PostCreate(id="p1", user_id="u1", user_name="Rahim", place_name="A"))
    second = await store.create_post(PostCreate(id="p2", user_id="u1", user_name="Karim", place_name="B"))

    assert second.value.user_name == "Rahim"
    assert count_rows("users") == 1


async def test_revote_overwrites_instead_of_accumulating(store, count_rows):
    await store.create_post(PostCreate(id="p1", user_id="u1", place_name="Test Mosque"))

    first = await store.cast_vote("p1", "voter", 1)
    assert (first.value.true_votes, first.value.false_votes) == (1, 0)

    second = await store.cast_vote("p1", "voter", 0)
    assert second.ok
    assert (second.value.true_votes, second.value.false_votes) == (0, 1)
    assert count_rows("votes", "post_id = ?", ("p1",)) == 1


async def test_tallies_count_each_user_once(store):
    await store.create_post(PostCreate(id="p1", place_name="Test Mosque"))
    await store.cast_vote("p1", "a", 1)
    await store.cast_vote("p1", "b", 1)
    await store.cast_vote("p1", "c", 0)
    await store.cast_vote("p1", "a", 1)
    await store.cast_vote("other", "a", 0)

    result = await store.tallies("p1")

    assert result.ok
    assert (result.value.true_votes, result.value.false_votes) == (2, 1)


async def test_tallies_for_unvoted_post_are_zero(store):
    result = await store.tallies("nobody-voted")

    assert (result.value.true_votes, result.value.false_votes) == (0, 0)


async def test_list_posts_orders_store_then_fallback_newest_first(store):
    await store.create_post(PostCreate(id="old", place_name="Old"))
    await store.create_post(PostCreate(id="new", place_name="New"))
    await store.cast_vote("old", "u", 1)
    store.fallback_posts.insert(0, PostResponse(id="mem-old", place_name="Mem old"))
    store.fallback_posts.insert(0, PostResponse(id="mem-new", place_name="Mem new"))

    result = await store.list_posts()

    assert result.ok
    assert [p.id for p in result.value] == ["new", "old", "mem-new", "mem-old"]
    old = result.value[1]
    assert (old.true_votes, old.false_votes) == (1, 0)


async def test_list_posts_degrades_to_fallback(store, drop_table):
    store.fallback_posts.append(PostResponse(id="mem", place_name="Mem"))
    drop_table("posts")

    result = await store.list_posts()

    assert result.status is StoreStatus.DEGRADED
    assert result.error is not None
    assert [p.id for p in result.value] == ["mem"]


async def test_create_post_degrades_to_fallback(store, drop_table, count_rows):
    drop_table("posts")

    first = await store.create_post(PostCreate(id="m1", user_id="u1", place_name="First"))
    second = await store.create_post(PostCreate(id="m2", user_id="u1", place_name="Second"))

    assert first.degraded and second.degraded
    assert second.value.true_votes == 0
    assert [p.id for p in store.fallback_posts] == ["m2", "m1"]
    # 用户插入随事务回滚
    assert count_rows("users") == 0


async def test_duplicate_post_id_falls_back_to_memory(store):
    await store.create_post(PostCreate(id="dup", place_name="First"))

    result = await store.create_post(PostCreate(id="dup", place_name="Again"))

    assert result.degraded
    listed = await store.list_posts()
    assert [p.place_name for p in listed.value] == ["First", "Again"]


async def test_create_post_fails_when_record_cannot_be_built(store, drop_table):
    drop_table("posts")

    result = await store.create_post(PostCreate(id="broken"))

    assert result.status is StoreStatus.FAILED
    assert result.value is None
    assert result.error is not None
    assert store.fallback_posts == []


async def test_cast_vote_degrades_to_zero_tallies(store, drop_table):
    await store.create_post(PostCreate(id="p1", place_name="Test Mosque"))
    await store.cast_vote("p1", "voter", 1)
    drop_table("votes")

    result = await store.cast_vote("p1", "voter", 0)

    assert result.degraded
    assert result.value.post_id == "p1"
    assert (result.value.true_votes, result.value.false_votes) == (0, 0)


async def test_create_report_appends_rows(store, count_rows):
    first = await store.create_report("p1", "u1", "wrong place")
    second = await store.create_report("p1", "u1", "wrong place")

    assert first.ok and second.ok
    assert first.value.success is True
    assert count_rows("reports", "post_id = ?", ("p1",)) == 2


async def test_create_report_degrades(store, drop_table):
    drop_table("reports")

    result = await store.create_report("p1", "u1", "spam")

    assert result.degraded
    assert result.value.success is True
