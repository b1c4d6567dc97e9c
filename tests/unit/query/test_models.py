"""Unit tests for query normalisation."""

import pytest

from webql.exceptions import InvalidQueryError
from webql.query.models import Step, normalize_query


class TestNormalizeQuery:
    """normalize_query accepts steps and lists of steps."""

    def test_bare_string_becomes_step_without_params(self) -> None:
        assert normalize_query("user") == [Step({"user": None})]

    def test_single_mapping_is_wrapped(self) -> None:
        assert normalize_query({"user": {"id": 1}}) == [Step({"user": {"id": 1}})]

    def test_mixed_list(self) -> None:
        steps = normalize_query(["a", {"b": "_a"}])
        assert [s.to_dict() for s in steps] == [{"a": None}, {"b": "_a"}]

    def test_multi_key_step_keeps_order(self) -> None:
        (step,) = normalize_query([{"a": 1, "b": 2}])
        assert step.keys() == ["a", "b"]

    def test_caller_query_is_not_mutated(self) -> None:
        query = ["a", {"b": 1}]
        normalize_query(query)
        assert query == ["a", {"b": 1}]

    def test_empty_list(self) -> None:
        assert normalize_query([]) == []

    @pytest.mark.parametrize("query", [42, None, b"user", 3.5])
    def test_unsupported_query_raises(self, query: object) -> None:
        with pytest.raises(InvalidQueryError):
            normalize_query(query)

    def test_unsupported_step_raises(self) -> None:
        with pytest.raises(InvalidQueryError) as exc_info:
            normalize_query(["a", 5])
        assert exc_info.value.step == 5

    def test_non_string_key_raises(self) -> None:
        with pytest.raises(InvalidQueryError):
            normalize_query([{1: "x"}])


class TestStep:
    """Step helpers."""

    def test_len_and_iter(self) -> None:
        step = Step({"a": 1, "b": 2})
        assert len(step) == 2
        assert list(step) == [("a", 1), ("b", 2)]
