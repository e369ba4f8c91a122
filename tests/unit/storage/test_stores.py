"""Behavioral tests shared by every QuoteStore implementation."""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import quoteflow.models  # noqa: F401
from quoteflow.database import Base
from quoteflow.enums import FileStatus, SourceKind
from quoteflow.exceptions import NotFoundError
from quoteflow.storage import InMemoryQuoteStore, QuoteFilter, QuoteStore, SqlQuoteStore
from quoteflow.utils import utcnow

MAPPING = {"sourceKind": "spreadsheet", "skipRows": 1, "fieldMappings": [], "textPatterns": {}}


@pytest.fixture(params=["memory", "sql"])
async def quote_store(request):
    if request.param == "memory":
        yield InMemoryQuoteStore()
        return

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield SqlQuoteStore(session)
    await engine.dispose()


async def seed_quotes(store, records, template_id=None, file_id=None):
    return await store.save_quotes(file_id, template_id, records)


class TestProtocol:
    @pytest.mark.asyncio
    async def test_implements_quote_store(self, quote_store):
        assert isinstance(quote_store, QuoteStore)


class TestColumns:
    @pytest.mark.asyncio
    async def test_crud(self, quote_store):
        column = await quote_store.create_column("amount", "number", required=True)

        updated = await quote_store.update_column(column.id, default_value="0")
        columns = await quote_store.list_columns()

        assert [c.name for c in columns] == ["amount"]
        assert updated.required is True
        assert updated.default_value == "0"

        await quote_store.delete_column(column.id)
        assert await quote_store.list_columns() == []

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_fields(self, quote_store):
        column = await quote_store.create_column("amount", "number")

        with pytest.raises(TypeError):
            await quote_store.update_column(column.id, colour="red")

    @pytest.mark.asyncio
    async def test_missing_column(self, quote_store):
        with pytest.raises(NotFoundError):
            await quote_store.delete_column(uuid.uuid4())


class TestTemplates:
    @pytest.mark.asyncio
    async def test_create_get_update(self, quote_store):
        template = await quote_store.create_template("Vendor A", MAPPING)

        fetched = await quote_store.get_template(template.id)
        assert fetched.name == "Vendor A"
        assert fetched.mapping_data == MAPPING
        assert fetched.specification.skip_rows == 1
        assert fetched.specification.name == "Vendor A"

        renamed = await quote_store.update_template(template.id, name="Vendor B")
        assert renamed.name == "Vendor B"
        assert renamed.mapping_data == MAPPING

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, quote_store):
        assert await quote_store.get_template(uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, quote_store):
        with pytest.raises(NotFoundError, match="Template"):
            await quote_store.update_template(uuid.uuid4(), name="x")

    @pytest.mark.asyncio
    async def test_delete_keeps_quotes(self, quote_store):
        template = await quote_store.create_template("Vendor A", MAPPING)
        [quote] = await seed_quotes(quote_store, [{"a": 1}], template_id=template.id)

        await quote_store.delete_template(template.id)

        assert await quote_store.list_templates() == []
        kept = await quote_store.get_quote(quote.id)
        assert kept.template_id is None
        assert kept.data == {"a": 1}


class TestFiles:
    @pytest.mark.asyncio
    async def test_lifecycle(self, quote_store):
        file = await quote_store.create_file(
            "q.csv", "abc.csv", SourceKind.DELIMITED_TEXT, 12, content_type="text/csv"
        )
        assert file.status == FileStatus.PENDING

        failed = await quote_store.update_file(file.id, status=FileStatus.FAILED, error="boom")
        assert failed.status == FileStatus.FAILED
        assert failed.error == "boom"
        assert [f.id for f in await quote_store.list_files()] == [file.id]

        await quote_store.delete_file(file.id)
        assert await quote_store.get_file(file.id) is None

    @pytest.mark.asyncio
    async def test_delete_keeps_quotes(self, quote_store):
        file = await quote_store.create_file("q.csv", "abc.csv", SourceKind.DELIMITED_TEXT, 12)
        [quote] = await seed_quotes(quote_store, [{"a": 1}], file_id=file.id)

        await quote_store.delete_file(file.id)

        assert (await quote_store.get_quote(quote.id)).file_id is None


class TestQuotes:
    @pytest.mark.asyncio
    async def test_save_quotes_persists_every_record(self, quote_store):
        saved = await seed_quotes(quote_store, [{"n": 1}, {"n": 2}, {"n": 3}])

        assert [q.version for q in saved] == [1, 1, 1]
        assert await quote_store.count_quotes() == 3
        assert sorted(q.data["n"] for q in await quote_store.list_quotes()) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_update_bumps_version(self, quote_store):
        [quote] = await seed_quotes(quote_store, [{"total": 10}])

        updated = await quote_store.update_quote(quote.id, {"total": 12})
        again = await quote_store.update_quote(quote.id, {"total": 13})

        assert updated.version == 2
        assert again.version == 3
        assert (await quote_store.get_quote(quote.id)).data == {"total": 13}

    @pytest.mark.asyncio
    async def test_delete(self, quote_store):
        [quote] = await seed_quotes(quote_store, [{"total": 10}])

        await quote_store.delete_quote(quote.id)

        assert await quote_store.get_quote(quote.id) is None
        with pytest.raises(NotFoundError):
            await quote_store.delete_quote(quote.id)

    @pytest.mark.asyncio
    async def test_filters(self, quote_store):
        template = await quote_store.create_template("T", MAPPING)
        in_template = await seed_quotes(
            quote_store, [{"vendor": "Acme"}, {"vendor": "Globex"}], template_id=template.id
        )
        await seed_quotes(quote_store, [{"vendor": "ACME Industries"}])

        by_template = await quote_store.list_quotes(QuoteFilter(template_id=template.id))
        by_keyword = await quote_store.list_quotes(QuoteFilter(keyword="acme"))
        by_ids = await quote_store.list_quotes(QuoteFilter(ids=[in_template[1].id]))

        assert {q.id for q in by_template} == {q.id for q in in_template}
        assert sorted(q.data["vendor"] for q in by_keyword) == ["ACME Industries", "Acme"]
        assert [q.data for q in by_ids] == [{"vendor": "Globex"}]
        assert await quote_store.count_quotes(QuoteFilter(keyword="acme", template_id=template.id)) == 1

    @pytest.mark.asyncio
    async def test_date_bounds(self, quote_store):
        await seed_quotes(quote_store, [{"n": 1}])
        now = utcnow()

        assert await quote_store.count_quotes(QuoteFilter(start=now - timedelta(hours=1))) == 1
        assert await quote_store.count_quotes(QuoteFilter(start=now + timedelta(hours=1))) == 0
        assert await quote_store.count_quotes(QuoteFilter(end=now - timedelta(hours=1))) == 0

    @pytest.mark.asyncio
    async def test_pagination(self, quote_store):
        await seed_quotes(quote_store, [{"n": i} for i in range(5)])

        first = await quote_store.list_quotes(offset=0, limit=2)
        rest = await quote_store.list_quotes(offset=2, limit=10)

        assert len(first) == 2
        assert len(rest) == 3
        assert {q.id for q in first}.isdisjoint({q.id for q in rest})

    @pytest.mark.asyncio
    async def test_newest_first(self, quote_store):
        [older] = await seed_quotes(quote_store, [{"n": "old"}])
        [newer] = await seed_quotes(quote_store, [{"n": "new"}])

        quotes = await quote_store.list_quotes()

        assert quotes[0].created_at >= quotes[1].created_at
        assert {q.id for q in quotes} == {older.id, newer.id}
