"""
Property-based tests with Hypothesis.

Entity models here are module level so no function-scoped fixture is shared
across generated examples.
"""

from datetime import datetime
from uuid import UUID, uuid4

import pytest
from hypothesis import given, settings, strategies as st
from pydantic import BaseModel, Field, ValidationError

from crud_contracts.operations import StandardOperations
from crud_contracts.query import (
    QueryComposer,
    create_pagination_config,
    create_search_config,
    create_sorting_config,
)
from crud_contracts.routes import RouteBuilder
from crud_contracts.schema import omit, partial, pick
from crud_contracts.utils.exceptions import BuilderFinalizedError, PaginationBoundsError


class Item(BaseModel):
    id: UUID
    sku: str = Field(min_length=1)
    quantity: int = Field(ge=0)
    price: float = Field(ge=0)
    createdAt: datetime
    updatedAt: datetime


FIELDS = list(Item.model_fields)
items = StandardOperations(Item, "item")

field_subsets = st.lists(st.sampled_from(FIELDS), unique=True)


class TestTransformProperties:
    """Properties of omit, pick and partial."""

    @given(names=field_subsets)
    @settings(max_examples=50)
    def test_omit_and_pick_partition_fields(self, names):
        """Property: omit(S, N) and pick(S, N) split the fields of S."""
        omitted = set(omit(Item, names).model_fields)
        picked = set(pick(Item, names).model_fields)
        assert omitted | picked == set(FIELDS)
        assert not omitted & picked
        assert picked == set(names)

    @given(names=field_subsets)
    @settings(max_examples=50)
    def test_retained_order_follows_source(self, names):
        """Property: derived models keep the source declaration order."""
        kept = list(omit(Item, names).model_fields)
        assert kept == [name for name in FIELDS if name not in names]

    @given(quantity=st.integers(min_value=-1000, max_value=1000))
    @settings(max_examples=50)
    def test_partial_keeps_constraints(self, quantity):
        """Property: a provided value is valid in the partial iff it is valid in the source."""
        model = partial(Item)
        if quantity >= 0:
            assert model.model_validate({"quantity": quantity}).quantity == quantity
        else:
            with pytest.raises(ValidationError):
                model.model_validate({"quantity": quantity})


class TestPaginationProperties:
    """Properties of pagination bounds."""

    @given(
        min_limit=st.integers(min_value=-5, max_value=50),
        default_limit=st.integers(min_value=-5, max_value=200),
        max_limit=st.integers(min_value=-5, max_value=200),
    )
    @settings(max_examples=100)
    def test_bounds_accepted_iff_ordered(self, min_limit, default_limit, max_limit):
        """Property: limits are accepted exactly when 1 <= min <= default <= max."""
        ordered = 1 <= min_limit <= default_limit <= max_limit
        if ordered:
            create_pagination_config(
                min_limit=min_limit, default_limit=default_limit, max_limit=max_limit
            )
        else:
            with pytest.raises(PaginationBoundsError):
                create_pagination_config(
                    min_limit=min_limit, default_limit=default_limit, max_limit=max_limit
                )

    @given(
        max_limit=st.integers(min_value=1, max_value=500),
        limit=st.integers(min_value=-10, max_value=600),
    )
    @settings(max_examples=100)
    def test_limit_within_bounds(self, max_limit, limit):
        """Property: a requested limit validates iff 1 <= limit <= max_limit."""
        schema = create_pagination_config(default_limit=1, max_limit=max_limit).schema
        if 1 <= limit <= max_limit:
            assert schema.model_validate({"limit": limit}).limit == limit
        else:
            with pytest.raises(ValidationError):
                schema.model_validate({"limit": limit})


class TestBatchProperties:
    """Properties of batch bounds."""

    @given(
        max_batch_size=st.integers(min_value=1, max_value=20),
        count=st.integers(min_value=0, max_value=25),
    )
    @settings(max_examples=60)
    def test_batch_delete_bounds(self, max_batch_size, count):
        """Property: 1 <= len(ids) <= max_batch_size is exactly what validates."""
        contract = items.batch_delete(max_batch_size=max_batch_size).build()
        body = {"body": {"ids": [str(uuid4()) for _ in range(count)]}}
        if 1 <= count <= max_batch_size:
            contract.validate_input(body)
        else:
            with pytest.raises(ValidationError):
                contract.validate_input(body)


class TestComposerProperties:
    """Properties of query composition."""

    @given(
        kinds=st.lists(
            st.sampled_from(["pagination", "sorting", "search"]),
            unique=True,
        ),
    )
    @settings(max_examples=30)
    def test_query_keys_are_union_of_dimension_keys(self, kinds):
        """Property: the flat query has exactly the keys of its dimensions."""
        descriptors = {
            "pagination": create_pagination_config(),
            "sorting": create_sorting_config(["sku"]),
            "search": create_search_config(["sku"]),
        }
        composer = QueryComposer()
        expected: set[str] = set()
        for kind in kinds:
            composer = getattr(composer, f"with_{kind}")(descriptors[kind])
            expected |= set(descriptors[kind].input_fields())
        assert set(composer.build_query_schema().model_fields) == expected
        assert ("meta" in composer.build_output_schema(Item).model_fields) == ("pagination" in kinds)

    @given(text=st.text(max_size=8))
    @settings(max_examples=50)
    def test_search_query_min_length(self, text):
        """Property: search text validates iff it meets the minimum length."""
        schema = create_search_config(["sku"], min_query_length=3).schema
        if len(text) >= 3:
            assert schema.model_validate({"query": text}).query == text
        else:
            with pytest.raises(ValidationError):
                schema.model_validate({"query": text})


class TestBuilderProperties:
    """Properties of route builders."""

    @given(
        summaries=st.lists(st.text(min_size=1, max_size=20), min_size=2, max_size=5, unique=True),
    )
    @settings(max_examples=30)
    def test_branches_never_affect_each_other(self, summaries):
        """Property: each branch keeps the summary it was given."""
        base = RouteBuilder().path("/")
        branches = [base.summary(summary) for summary in summaries]
        assert base.route_metadata.summary is None
        for branch, summary in zip(branches, summaries):
            assert branch.build().summary == summary

    @given(summary=st.text(max_size=20))
    @settings(max_examples=20)
    def test_built_builder_is_frozen(self, summary):
        """Property: any mutation after build() raises."""
        builder = items.read()
        builder.build()
        with pytest.raises(BuilderFinalizedError):
            builder.summary(summary)

    @given(quantity=st.integers(min_value=-100, max_value=100))
    @settings(max_examples=50)
    def test_check_mirrors_field_constraints(self, quantity):
        """Property: check(field) accepts a value iff the entity field would."""
        contract = items.check("quantity").build()
        if quantity >= 0:
            contract.validate_input({"quantity": quantity})
        else:
            with pytest.raises(ValidationError):
                contract.validate_input({"quantity": quantity})
