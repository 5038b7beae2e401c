import pytest

from openapi_to_zod.config import OperationFilters
from openapi_to_zod.filters import FilterStatistics, format_filter_statistics, should_include_operation, validate_filters

LIST_USERS = {"operationId": "listUsers", "tags": ["users"]}
DELETE_USER = {"operationId": "deleteUser", "tags": ["users", "admin"], "deprecated": True}


class TestShouldIncludeOperation:
    def test_no_filters_include_everything(self):
        assert should_include_operation(DELETE_USER, "/users/{id}", "delete", None)
        assert should_include_operation(DELETE_USER, "/users/{id}", "delete", OperationFilters())

    @pytest.mark.parametrize(
        "filters,expected",
        [
            (OperationFilters(include_tags=["users"]), True),
            (OperationFilters(include_tags=["orders"]), False),
            (OperationFilters(include_paths=["/users*"]), True),
            (OperationFilters(include_paths=["/orders/**"]), False),
            (OperationFilters(include_methods=["GET"]), True),
            (OperationFilters(include_operation_ids=["list*"]), True),
            (OperationFilters(exclude_operation_ids=["listUsers"]), False),
            (OperationFilters(exclude_methods=["get"]), False),
        ],
        ids=["tag", "other_tag", "path_glob", "other_path", "method_case", "operation_id_glob", "excluded_id", "excluded_method"],
    )
    def test_single_filters(self, filters, expected):
        assert should_include_operation(LIST_USERS, "/users", "get", filters) is expected

    def test_exclusion_wins_over_inclusion(self):
        filters = OperationFilters(include_tags=["users"], exclude_tags=["admin"])
        assert should_include_operation(LIST_USERS, "/users", "get", filters)
        assert not should_include_operation(DELETE_USER, "/users/{id}", "delete", filters)

    def test_exclude_deprecated(self):
        filters = OperationFilters(exclude_deprecated=True)
        assert not should_include_operation(DELETE_USER, "/users/{id}", "delete", filters)
        assert should_include_operation(LIST_USERS, "/users", "get", filters)

    def test_operation_id_filters_skip_operations_without_ids(self):
        filters = OperationFilters(include_operation_ids=["*"])
        assert not should_include_operation({"tags": ["users"]}, "/users", "get", filters)

    def test_statistics_record_the_reason(self):
        stats = FilterStatistics()
        filters = OperationFilters(include_methods=["post"], exclude_deprecated=True)
        should_include_operation(LIST_USERS, "/users", "get", filters, stats)
        should_include_operation(DELETE_USER, "/users/{id}", "post", filters, stats)
        assert stats.filtered_by_methods == 1
        assert stats.filtered_by_deprecated == 1
        assert stats.filtered_operations == 2


class TestValidateFilters:
    def test_warns_when_nothing_is_left(self, caplog):
        stats = FilterStatistics(total_operations=3, filtered_by_tags=2, filtered_by_paths=1)
        validate_filters(stats, OperationFilters(include_tags=["x"]))
        assert "All 3 operations were filtered out" in caplog.text
        assert "Filtered: 2 by tags, 1 by paths" in caplog.text

    @pytest.mark.parametrize(
        "stats,filters",
        [
            (FilterStatistics(total_operations=3, included_operations=1), OperationFilters()),
            (FilterStatistics(), OperationFilters()),
            (FilterStatistics(total_operations=3), None),
        ],
        ids=["some_included", "no_operations", "no_filters"],
    )
    def test_silent_otherwise(self, caplog, stats, filters):
        validate_filters(stats, filters)
        assert caplog.text == ""


def test_format_filter_statistics():
    stats = FilterStatistics(total_operations=4, included_operations=1, filtered_by_tags=2, filtered_by_deprecated=1)
    assert format_filter_statistics(stats) == [
        "Operation Filtering:",
        "  Total operations: 4",
        "  Included operations: 1",
        "  Filtered operations: 3",
        "    - By tags: 2",
        "    - By deprecated: 1",
    ]
    assert format_filter_statistics(FilterStatistics()) == []
