"""
Unit Tests for the Entity Store

Transactions are all-or-nothing; updates stamp updated_at; listings are
ordered.
"""

import pytest
from sqlalchemy import update

from warranty_engine.core.exceptions import InvalidInputError
from warranty_engine.models import Customer, Product


def _product(**fields):
    data = {"sku": "SKU-1", "name": "Washer", "category": "Washers", "brand": "LG",
            "model_number": "WM4000"}
    data.update(fields)
    return data


class TestTransactions:

    async def test_commit_on_success(self, store, reload):
        async with store.transaction():
            product = await store.create(Product, **_product())

        assert product.product_id == "PRD-002"
        assert (await reload(Product, "PRD-002")).sku == "SKU-1"

    async def test_rollback_on_error(self, store):
        with pytest.raises(RuntimeError):
            async with store.transaction():
                await store.create(Product, **_product())
                await store.create(Product, **_product(sku="SKU-2"))
                raise RuntimeError("boom")

        assert await store.count(Product) == 0
        assert await store.identifiers.next_identifier(Product) == "PRD-002"

    async def test_lock_released_after_error(self, store):
        with pytest.raises(ValueError):
            async with store.transaction():
                raise ValueError("bad")

        assert not store.lock.locked()
        async with store.transaction():
            await store.create(Product, **_product())
        assert await store.count(Product) == 1

    async def test_read_consistent_holds_lock(self, store):
        async with store.read_consistent():
            assert store.lock.locked()
        assert not store.lock.locked()


class TestReadsAndUpdates:

    async def test_get_missing_and_empty_ids(self, store):
        assert await store.get(Product, "PRD-404") is None
        assert await store.get(Product, None) is None
        assert await store.get(Product, "") is None

    async def test_update_missing_returns_none(self, store):
        async with store.transaction():
            assert await store.update(Product, "PRD-404", {"name": "Ghost"}) is None

    async def test_update_merges_and_stamps(self, store, reload):
        async with store.transaction():
            await store.create(Product, **_product())
        stored = await reload(Product, "PRD-002")
        created_at = stored.created_at
        stamped = stored.updated_at

        async with store.transaction():
            product = await store.update(Product, "PRD-002", {"name": "Front Load Washer"})

        assert product.name == "Front Load Washer"
        assert product.sku == "SKU-1"
        assert product.created_at == created_at
        assert product.updated_at.replace(tzinfo=None) >= stamped.replace(tzinfo=None)

    async def test_update_rejects_unknown_fields(self, store, reload):
        async with store.transaction():
            await store.create(Product, **_product())

        with pytest.raises(InvalidInputError) as exc_info:
            async with store.transaction():
                await store.update(Product, "PRD-002", {
                    "name": "Front Load Washer",
                    "not_a_column": "x",
                })

        assert exc_info.value.details == {"entity": "Product", "fields": ["not_a_column"]}
        assert (await reload(Product, "PRD-002")).name == "Washer"

    async def test_update_checks_fields_before_lookup(self, store):
        with pytest.raises(InvalidInputError):
            async with store.transaction():
                await store.update(Product, "PRD-404", {"colour": "white"})

    async def test_get_rereads_committed_row(self, store, db):
        async with store.transaction():
            product = await store.create(Product, **_product())

        await db.execute(
            update(Product).where(Product.product_id == "PRD-002").values(name="Dryer")
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        assert product.name == "Washer"
        assert (await store.get(Product, "PRD-002")).name == "Dryer"
        assert product.name == "Dryer"

    async def test_list_ordering(self, store):
        async with store.transaction():
            for sku in ("A", "B", "C"):
                await store.create(Product, **_product(sku=sku))

        oldest_first = await store.list(Product)
        newest_first = await store.list(Product, newest_first=True)
        only_b = await store.list(Product, Product.sku == "B")

        assert [p.product_id for p in oldest_first] == ["PRD-002", "PRD-003", "PRD-004"]
        assert [p.product_id for p in newest_first] == ["PRD-004", "PRD-003", "PRD-002"]
        assert [p.sku for p in only_b] == ["B"]

    async def test_count_with_criteria(self, store):
        async with store.transaction():
            await store.create(Customer, first_name="A", last_name="B", email="a@example.com",
                               active=True)
            await store.create(Customer, first_name="C", last_name="D", email="c@example.com",
                               active=False)

        assert await store.count(Customer) == 2
        assert await store.count(Customer, Customer.active.is_(True)) == 1
