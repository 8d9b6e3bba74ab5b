import pytest

from searchbuilder.database import Database
from searchbuilder.query.builder import Query
from searchbuilder.search.builder import SearchBuilder
from tests.conftest import FooModel, SoftDeleteModel


def ids_where_in(ids: list[int]) -> Query:
    return FooModel.select("id").where_in("id", ids)


class TestRanking:
    @pytest.mark.asyncio
    async def test_zero_conditions_match_nothing(self, db: Database):
        rows = await FooModel.search_builder().get(db.conn)
        assert rows == []

    @pytest.mark.asyncio
    async def test_single_condition(self, db: Database):
        rows = await FooModel.search_builder().search(ids_where_in([1, 2, 3]), score=5).get(db.conn)

        assert sorted(r.id for r in rows) == [1, 2, 3]
        assert all(r.score == 5 for r in rows)

    @pytest.mark.asyncio
    async def test_scores_summed_per_id(self, db: Database):
        rows = await (
            FooModel.search_builder()
            .search(ids_where_in([1, 2]), score=10)
            .search(ids_where_in([2, 3]), score=3)
            .get(db.conn)
        )

        assert [(r.id, r.score) for r in rows] == [(2, 13), (1, 10), (3, 3)]

    @pytest.mark.asyncio
    async def test_identical_matches_both_count(self, db: Database):
        rows = await (
            FooModel.search_builder()
            .search(ids_where_in([1]), score=4)
            .search(ids_where_in([1]), score=4)
            .get(db.conn)
        )

        assert [(r.id, r.score) for r in rows] == [(1, 8)]

    @pytest.mark.asyncio
    async def test_fallback_scores_rank_by_registration(self, db: Database):
        rows = await (
            FooModel.search_builder()
            .search(FooModel.select("id").where("name", "gamma"))
            .search(FooModel.select("id").where("name", "alpha"))
            .search(FooModel.select("id").where("name", "beta"))
            .get(db.conn)
        )

        assert [(r.name, r.score) for r in rows] == [("gamma", 3), ("alpha", 2), ("beta", 1)]

    @pytest.mark.asyncio
    async def test_rows_not_duplicated(self, db: Database):
        builder = FooModel.search_builder()
        for column in ("foo", "bar", "name"):
            builder.search(FooModel.select("id").where_like(column, "%a%"))

        rows = await builder.get(db.conn)
        ids = [r.id for r in rows]

        assert len(ids) == len(set(ids))

    @pytest.mark.asyncio
    async def test_full_rows_returned(self, db: Database):
        rows = await FooModel.search_builder().search(ids_where_in([3])).get(db.conn)

        assert len(rows) == 1
        assert isinstance(rows[0], FooModel)
        assert (rows[0].foo, rows[0].bar, rows[0].name) == ("baz", "qux", "gamma")

    @pytest.mark.asyncio
    async def test_negative_score_lowers_rank(self, db: Database):
        rows = await (
            FooModel.search_builder()
            .search(ids_where_in([1, 2]), score=5)
            .search(ids_where_in([1]), score=-10)
            .get(db.conn)
        )

        assert [(r.id, r.score) for r in rows] == [(2, 5), (1, -5)]

    @pytest.mark.asyncio
    async def test_split_terms_search(self, db: Database):
        def by_term(builder: SearchBuilder, term: str) -> None:
            builder.search(FooModel.select("id").where("foo", term), score=2)
            builder.search(FooModel.select("id").where("bar", term), score=1)

        rows = await FooModel.search_builder().split_terms("bar-qux.bar", by_term).get(db.conn)

        # foo=bar -> 1, 2 (+2); bar=qux -> 2, 3 (+1)
        assert [(r.id, r.score) for r in rows] == [(2, 3), (1, 2), (3, 1)]


class TestBaseQuery:
    @pytest.mark.asyncio
    async def test_soft_deleted_rows_excluded(self, db: Database):
        builder = SoftDeleteModel.search_builder().search(SoftDeleteModel.select("id").where("foo", "bar"))

        scored = await builder.get_score_query().get(db.conn)
        rows = await builder.get(db.conn)

        # The deleted row takes part in scoring but never reaches the output
        assert {r["id"] for r in scored} >= {1, 2}
        assert [r.id for r in rows] == [1]

    @pytest.mark.asyncio
    async def test_base_query_filters_apply(self, db: Database):
        rows = await (
            FooModel.search_builder()
            .set_query(FooModel.where("bar", "qux"))
            .search(ids_where_in([1, 2, 3]))
            .get(db.conn)
        )

        assert sorted(r.id for r in rows) == [2, 3]

    @pytest.mark.asyncio
    async def test_returned_query_is_composable(self, db: Database):
        query = (
            FooModel.search_builder()
            .search(ids_where_in([1, 2]), score=10)
            .search(ids_where_in([2, 3]), score=3)
            .get_query()
        )

        rows = await query.limit(2).get(db.conn)

        assert [r.id for r in rows] == [2, 1]

    @pytest.mark.asyncio
    async def test_raw_table_binding_returns_dicts(self, db: Database):
        rows = await (
            SearchBuilder("foo_models")
            .search(Query.table_("foo_models").select("id").where("foo", "bar"), score=2)
            .get(db.conn)
        )

        assert sorted(r["id"] for r in rows) == [1, 2]
        assert all(r["score"] == 2 for r in rows)

    @pytest.mark.asyncio
    async def test_sub_select_base_query(self, db: Database):
        base = Query().from_sub(Query.table_("foo_models").where("bar", "qux"), "f")
        rows = await (
            SearchBuilder("foo_models")
            .set_query(base)
            .search(ids_where_in([1, 2, 3]), score=4)
            .get(db.conn)
        )

        assert sorted(r["id"] for r in rows) == [2, 3]
        assert all(r["score"] == 4 for r in rows)


class TestTermValues:
    @pytest.mark.asyncio
    async def test_operator_words_are_plain_terms(self, db: Database):
        rows = await (
            FooModel.search_builder()
            .split_terms("what is", lambda b, term: b.search(FooModel.select("id").where("name", term)))
            .get(db.conn)
        )

        # "is" must compare as text, not turn into `name IS NULL` and match row 5
        assert rows == []

    @pytest.mark.asyncio
    async def test_operator_word_term_still_matches_text(self, db: Database):
        rows = await (
            FooModel.search_builder()
            .split_terms("like beta", lambda b, term: b.search(FooModel.select("id").where("name", term)))
            .get(db.conn)
        )

        assert [(r.id, r.score) for r in rows] == [(2, 1)]
