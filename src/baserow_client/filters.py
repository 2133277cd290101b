"""Filter and sort expressions for row listings.

A ``QuerySpec`` is an immutable value: every builder method returns a new
spec, so a spec can be shared and extended without one caller's additions
leaking into another's request.

Serialization follows Baserow's query-string conventions::

    filter__field_23__equal=value
    order_by=field_4,-field_7
    page=2&size=50
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from baserow_client.mapper import FieldCatalog, FieldMapper, MappingMode

DEFAULT_PAGE_SIZE = 100


class FilterOperator(StrEnum):
    """Baserow filter types; each value is the API operator token."""

    EQUAL = "equal"
    NOT_EQUAL = "not_equal"

    # Date
    DATE_IS = "date_is"
    DATE_IS_NOT = "date_is_not"
    DATE_IS_BEFORE = "date_is_before"
    DATE_IS_ON_OR_BEFORE = "date_is_on_or_before"
    DATE_IS_AFTER = "date_is_after"
    DATE_IS_ON_OR_AFTER = "date_is_on_or_after"
    DATE_IS_WITHIN = "date_is_within"
    DATE_EQUAL = "date_equal"
    DATE_NOT_EQUAL = "date_not_equal"
    DATE_EQUALS_TODAY = "date_equals_today"
    DATE_BEFORE_TODAY = "date_before_today"
    DATE_AFTER_TODAY = "date_after_today"
    DATE_WITHIN_DAYS = "date_within_days"
    DATE_WITHIN_WEEKS = "date_within_weeks"
    DATE_WITHIN_MONTHS = "date_within_months"
    DATE_EQUALS_DAYS_AGO = "date_equals_days_ago"
    DATE_EQUALS_MONTHS_AGO = "date_equals_months_ago"
    DATE_EQUALS_YEARS_AGO = "date_equals_years_ago"
    DATE_EQUALS_WEEK = "date_equals_week"
    DATE_EQUALS_MONTH = "date_equals_month"
    DATE_EQUALS_YEAR = "date_equals_year"
    DATE_EQUALS_DAY_OF_MONTH = "date_equals_day_of_month"
    DATE_BEFORE = "date_before"
    DATE_BEFORE_OR_EQUAL = "date_before_or_equal"
    DATE_AFTER = "date_after"
    DATE_AFTER_OR_EQUAL = "date_after_or_equal"
    DATE_AFTER_DAYS_AGO = "date_after_days_ago"

    # Value presence (array-valued fields)
    HAS_EMPTY_VALUE = "has_empty_value"
    HAS_NOT_EMPTY_VALUE = "has_not_empty_value"
    HAS_VALUE_EQUAL = "has_value_equal"
    HAS_NOT_VALUE_EQUAL = "has_not_value_equal"
    HAS_VALUE_CONTAINS = "has_value_contains"
    HAS_NOT_VALUE_CONTAINS = "has_not_value_contains"
    HAS_VALUE_CONTAINS_WORD = "has_value_contains_word"
    HAS_NOT_VALUE_CONTAINS_WORD = "has_not_value_contains_word"
    HAS_VALUE_LENGTH_IS_LOWER_THAN = "has_value_length_is_lower_than"
    HAS_ALL_VALUES_EQUAL = "has_all_values_equal"
    HAS_ANY_SELECT_OPTION_EQUAL = "has_any_select_option_equal"
    HAS_NONE_SELECT_OPTION_EQUAL = "has_none_select_option_equal"

    # Text
    CONTAINS = "contains"
    CONTAINS_NOT = "contains_not"
    CONTAINS_WORD = "contains_word"
    DOESNT_CONTAIN_WORD = "doesnt_contain_word"
    LENGTH_IS_LOWER_THAN = "length_is_lower_than"

    # Files
    FILENAME_CONTAINS = "filename_contains"
    HAS_FILE_TYPE = "has_file_type"
    FILES_LOWER_THAN = "files_lower_than"

    # Numbers
    HIGHER_THAN = "higher_than"
    HIGHER_THAN_OR_EQUAL = "higher_than_or_equal"
    LOWER_THAN = "lower_than"
    LOWER_THAN_OR_EQUAL = "lower_than_or_equal"
    IS_EVEN_AND_WHOLE = "is_even_and_whole"

    # Selects and booleans
    SINGLE_SELECT_EQUAL = "single_select_equal"
    SINGLE_SELECT_NOT_EQUAL = "single_select_not_equal"
    SINGLE_SELECT_IS_ANY_OF = "single_select_is_any_of"
    SINGLE_SELECT_IS_NONE_OF = "single_select_is_none_of"
    BOOLEAN = "boolean"

    # Link rows
    LINK_ROW_HAS = "link_row_has"
    LINK_ROW_HAS_NOT = "link_row_has_not"
    LINK_ROW_CONTAINS = "link_row_contains"
    LINK_ROW_NOT_CONTAINS = "link_row_not_contains"

    # Multiple select / collaborators
    MULTIPLE_SELECT_HAS = "multiple_select_has"
    MULTIPLE_SELECT_HAS_NOT = "multiple_select_has_not"
    MULTIPLE_COLLABORATORS_HAS = "multiple_collaborators_has"
    MULTIPLE_COLLABORATORS_HAS_NOT = "multiple_collaborators_has_not"

    # Emptiness
    EMPTY = "empty"
    NOT_EMPTY = "not_empty"

    # Users
    USER_IS = "user_is"
    USER_IS_NOT = "user_is_not"


class OrderDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class FilterClause:
    field_key: str
    operator: FilterOperator
    value: str

    def param_name(self, api_key: str) -> str:
        return f"filter__{api_key}__{self.operator.value}"


@dataclass(frozen=True)
class SortClause:
    field_key: str
    direction: OrderDirection = OrderDirection.ASC

    def render(self, api_key: str) -> str:
        prefix = "-" if self.direction is OrderDirection.DESC else ""
        return f"{prefix}{api_key}"


@dataclass(frozen=True)
class QuerySpec:
    """Filters, ordering and pagination for one row listing.

    Filters are combined with AND. Field keys are stored exactly as given;
    translation to API keys happens in ``to_query_params``.
    """

    filters: tuple[FilterClause, ...] = ()
    sort: tuple[SortClause, ...] = ()
    page: int = 1
    size: int = DEFAULT_PAGE_SIZE
    view_id: int | None = None
    search: str | None = None

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be a positive integer, got {self.page}")
        if self.size < 1:
            raise ValueError(f"size must be a positive integer, got {self.size}")

    def filter_by(
        self,
        field_key: str,
        operator: FilterOperator | str,
        value: object = "",
    ) -> QuerySpec:
        clause = FilterClause(field_key, FilterOperator(operator), _format_value(value))
        return replace(self, filters=self.filters + (clause,))

    def order_by(
        self,
        field_key: str,
        direction: OrderDirection | str = OrderDirection.ASC,
    ) -> QuerySpec:
        clause = SortClause(field_key, OrderDirection(direction))
        existing = [s.field_key for s in self.sort]
        if field_key in existing:
            sort = list(self.sort)
            sort[existing.index(field_key)] = clause
            return replace(self, sort=tuple(sort))
        return replace(self, sort=self.sort + (clause,))

    def with_page(self, page: int) -> QuerySpec:
        return replace(self, page=page)

    def with_size(self, size: int) -> QuerySpec:
        return replace(self, size=size)

    def with_view(self, view_id: int | None) -> QuerySpec:
        return replace(self, view_id=view_id)

    def with_search(self, search: str | None) -> QuerySpec:
        return replace(self, search=search or None)

    def to_query_params(
        self,
        mode: MappingMode,
        catalog: FieldCatalog | None = None,
    ) -> list[tuple[str, str]]:
        """Serialize to ordered ``(name, value)`` query parameters.

        Raises:
            UnknownFieldError: A field key has no match in the catalog.
        """
        params: list[tuple[str, str]] = []

        for clause in self.filters:
            api_key = FieldMapper.to_api_key(mode, catalog, clause.field_key)
            params.append((clause.param_name(api_key), clause.value))

        if self.sort:
            rendered = [
                s.render(FieldMapper.to_api_key(mode, catalog, s.field_key)) for s in self.sort
            ]
            params.append(("order_by", ",".join(rendered)))

        params.append(("page", str(self.page)))
        params.append(("size", str(self.size)))

        if self.view_id is not None:
            params.append(("view_id", str(self.view_id)))
        if self.search:
            params.append(("search", self.search))
        if mode is MappingMode.USER_FIELD_NAMES:
            params.append(("user_field_names", "true"))

        return params


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "FilterClause",
    "FilterOperator",
    "OrderDirection",
    "QuerySpec",
    "SortClause",
]
