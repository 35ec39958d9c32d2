import pytest
from pymongo.errors import OperationFailure

from catalog_search.domain.repositories.catalog_repo import TEXT_INDEX


@pytest.mark.asyncio
async def test_find_applies_sort_skip_limit_and_projection(repo):
    docs = await repo.find({}, {"name": 1}, sort=[("price", -1)], skip=1, limit=2)
    assert docs == [{"_id": "p4", "name": "Green Tea"}, {"_id": "p5", "name": "Black Tea"}]


@pytest.mark.asyncio
async def test_count(repo):
    assert await repo.count({"category": "Snacks"}) == 2


@pytest.mark.asyncio
async def test_set_first_image_only_touches_index_zero(repo, collection):
    collection.docs[0]["images"].append("second.jpg")
    await repo.set_first_image("p1", {"publicId": "x"})
    assert collection.docs[0]["images"] == [{"publicId": "x"}, "second.jpg"]


@pytest.mark.asyncio
async def test_ensure_indexes_creates_text_index(repo, collection):
    await repo.ensure_indexes()
    names = [kw.get("name") for _, kw in collection.indexes]
    assert TEXT_INDEX in names
    text_keys = next(keys for keys, kw in collection.indexes if kw.get("name") == TEXT_INDEX)
    assert [k for k, _ in text_keys] == ["name", "description", "category", "tags"]


@pytest.mark.asyncio
async def test_existing_text_index_does_not_block_sort_indexes(repo, collection):
    create_index = collection.create_index

    async def one_text_index_only(keys, **kwargs):
        if kwargs.get("name") == TEXT_INDEX:
            raise OperationFailure("An equivalent index already exists with a different name and options")
        return await create_index(keys, **kwargs)

    collection.create_index = one_text_index_only
    await repo.ensure_indexes()

    created = [[k for k, _ in keys] for keys, _ in collection.indexes]
    assert ["sales", "views", "createdAt"] in created
    assert ["category", "price"] in created
