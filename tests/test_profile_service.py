import pytest

from app.core.exceptions import InvalidInput, NotFound
from app.models.profile import Identity, Profile
from app.services.profile.service import SubmitStatus


async def test_two_source_scenario(service, store, user_x):
    first = await service.submit_titles(user_x, "A", ["Heat", "Alien"], display_name="Xavier")
    assert first.status is SubmitStatus.CREATED
    stored = await store.find_by_id("user-x")
    assert stored.embedding == [0.5, 0.5]
    assert stored.email == "x@example.com"
    assert stored.display_name == "Xavier"
    assert stored.both_sources_obtained is False

    second = await service.submit_titles(user_x, "B", ["Up"])
    assert second.status is SubmitStatus.UPDATED
    stored = await store.find_by_id("user-x")
    assert stored.embedding == [0.75, 0.75]
    assert stored.both_sources_obtained is True


async def test_resubmitting_same_source_overwrites(service, store, user_x):
    await service.submit_titles(user_x, "A", ["Heat", "Alien"])
    result = await service.submit_titles(user_x, "A", ["Fargo"])

    assert result.status is SubmitStatus.UPDATED
    stored = await store.find_by_id("user-x")
    assert stored.embedding == [0.2, 0.8]
    assert stored.both_sources_obtained is False


async def test_complete_profile_skips_embedding_and_save(service, store, embedder, user_x):
    await service.submit_titles(user_x, "A", ["Heat"])
    await service.submit_titles(user_x, "B", ["Alien"])
    before = (await store.find_by_id("user-x")).model_dump_json()
    calls_before = len(embedder.calls)

    result = await service.submit_titles(user_x, "A", ["Up"])

    assert result.status is SubmitStatus.ALREADY_COMPLETE
    assert len(embedder.calls) == calls_before
    assert (await store.find_by_id("user-x")).model_dump_json() == before


async def test_titles_are_cleaned_before_embedding(service, embedder, user_x):
    await service.submit_titles(user_x, "A", ["  Heat ", "", "Alien", "   "])
    assert embedder.calls == [["Heat", "Alien"]]


async def test_every_title_is_embedded_across_batches(service, store, embedder, user_x):
    embedder.vectors.update({"t0": [1.0, 0.0], "t1": [1.0, 0.0], "t2": [0.0, 1.0], "t3": [0.0, 1.0], "t4": [0.0, 1.0]})

    result = await service.submit_titles(user_x, "A", ["t0", "t1", "t2", "t3", "t4"])

    assert result.status is SubmitStatus.CREATED
    assert embedder.calls == [["t0", "t1"], ["t2", "t3"], ["t4"]]
    assert (await store.find_by_id("user-x")).embedding == pytest.approx([0.4, 0.6])


async def test_repeated_titles_each_count(service, store, user_x):
    await service.submit_titles(user_x, "A", ["Heat", "Heat", "Heat", "Alien"])
    assert (await store.find_by_id("user-x")).embedding == [0.75, 0.25]


@pytest.mark.parametrize("titles", [[], ["", "   "]])
async def test_empty_titles_are_rejected(service, store, titles, user_x):
    with pytest.raises(InvalidInput, match="title"):
        await service.submit_titles(user_x, "A", titles)
    assert await store.find_by_id("user-x") is None


@pytest.mark.parametrize("service_type", ["", None, "C"])
async def test_unknown_service_type_is_rejected(service, user_x, service_type):
    with pytest.raises(InvalidInput):
        await service.submit_titles(user_x, service_type, ["Heat"])


async def test_dimension_mismatch_commits_nothing(service, store, embedder, user_x):
    await service.submit_titles(user_x, "A", ["Heat"])
    embedder.vectors["Wide"] = [1.0, 0.0, 0.0]

    with pytest.raises(InvalidInput):
        await service.submit_titles(user_x, "B", ["Wide"])
    assert (await store.find_by_id("user-x")).embedding == [1.0, 0.0]


async def test_rank_similar_end_to_end(service, store):
    await store.save(Profile(id="me", embedding=[1.0, 0.0]))
    await store.save(Profile(id="same", embedding=[1.0, 0.0], display_name="Same"))
    await store.save(Profile(id="orthogonal", embedding=[0.0, 1.0]))
    await store.save(Profile(id="close", embedding=[0.9, 0.1]))
    await store.save(Profile(id="pending"))

    result = await service.rank_similar("me", 2)

    assert [r.user_id for r in result.results] == ["same", "close"]
    assert result.results[0].display_name == "Same"
    assert not result.fewer_available


async def test_rank_similar_never_includes_subject(service, store):
    await store.save(Profile(id="me", embedding=[1.0, 0.0]))
    await store.save(Profile(id="other", embedding=[0.0, 1.0]))

    result = await service.rank_similar("me", 5)

    assert [r.user_id for r in result.results] == ["other"]
    assert result.fewer_available


async def test_rank_similar_requires_subject_embedding(service, store):
    with pytest.raises(NotFound):
        await service.rank_similar("ghost", 3)

    await store.save(Profile(id="pending"))
    with pytest.raises(NotFound):
        await service.rank_similar("pending", 3)


async def test_rank_similar_rejects_bad_k(service):
    with pytest.raises(InvalidInput):
        await service.rank_similar("me", 0)


async def test_similarity_between(service, store):
    await store.save(Profile(id="a", embedding=[1.0, 0.0]))
    await store.save(Profile(id="b", embedding=[1.0, 1.0]))
    await store.save(Profile(id="c"))

    assert await service.similarity_between("a", "b") == pytest.approx(0.7071, abs=1e-4)
    assert await service.similarity_between("a", "b") == await service.similarity_between("b", "a")
    with pytest.raises(NotFound, match="'c'"):
        await service.similarity_between("a", "c")
    with pytest.raises(NotFound, match="'missing'"):
        await service.similarity_between("missing", "a")


async def test_identity_without_email_stores_empty_email(service, store):
    await service.submit_titles(Identity(uid="anon"), "B", ["Up"])
    assert (await store.find_by_id("anon")).email == ""
