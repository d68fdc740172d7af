"""
Generic, column-definition-driven table helpers.

Pages own their column and filter definitions; the helpers here only know
about row dictionaries. The filter bar is config-driven: each page passes
its `FilterColumn` list and the same search/filter/sort code runs for
patients, medicines and any future directory.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Union

ASC = "asc"
DESC = "desc"


@dataclass
class ColumnDef:
    key: str
    header: str
    accessor: Union[str, Callable[[dict], Any], None] = None
    cell: Optional[str] = None  # macro name in components/cells.html
    sortable: bool = True

    def value(self, row: Mapping) -> Any:
        if callable(self.accessor):
            return self.accessor(row)
        return row.get(self.accessor or self.key)


@dataclass
class FilterOption:
    label: str
    value: str


@dataclass
class FilterColumn:
    """Describes a column that can be filtered."""
    key: str
    label: str
    type: str = "select"  # "select" | "text"
    options: List[FilterOption] = field(default_factory=list)

    def option_label(self, value: str) -> str:
        for option in self.options:
            if option.value == value:
                return option.label
        return value


@dataclass
class ActiveFilter:
    column_key: str
    value: str


@dataclass
class HeaderCell:
    key: str
    header: str
    sortable: bool
    sorted: Optional[str]  # None | "asc" | "desc"
    next_direction: str


@dataclass
class TableView:
    headers: List[HeaderCell]
    columns: List[ColumnDef]
    rows: List[dict]

    @property
    def is_empty(self) -> bool:
        return not self.rows


def search_rows(rows: Iterable[dict], query: Optional[str], fields: Sequence[str]) -> List[dict]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(rows)
    return [
        row for row in rows
        if any(needle in str(row.get(f) or "").lower() for f in fields)
    ]


def _matches(row: dict, column: FilterColumn, value: str) -> bool:
    cell = row.get(column.key)
    if column.type == "text":
        return value.lower() in str(cell or "").lower()
    return str(cell if cell is not None else "") == value


def apply_filters(rows: Iterable[dict], filters: Iterable[ActiveFilter], columns: Sequence[FilterColumn]) -> List[dict]:
    """Every non-empty filter must match (AND). Unknown columns are ignored."""
    by_key = {c.key: c for c in columns}
    active = [
        (by_key[f.column_key], f.value)
        for f in filters
        if f.value and f.column_key in by_key
    ]
    return [row for row in rows if all(_matches(row, col, value) for col, value in active)]


def _sort_value(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def sort_rows(rows: Iterable[dict], key: Optional[str], direction: str = ASC) -> List[dict]:
    """Stable sort on `key`; rows missing a value always go last."""
    rows = list(rows)
    if not key:
        return rows
    present = [r for r in rows if r.get(key) is not None]
    missing = [r for r in rows if r.get(key) is None]
    present.sort(key=lambda r: _sort_value(r[key]), reverse=direction == DESC)
    return present + missing


def parse_filters(args: Mapping[str, str], columns: Sequence[FilterColumn]) -> List[ActiveFilter]:
    filters = []
    for column in columns:
        value = (args.get(f"filter_{column.key}") or "").strip()
        if value:
            filters.append(ActiveFilter(column_key=column.key, value=value))
    return filters


def remove_filter(filters: Sequence[ActiveFilter], index: int) -> List[ActiveFilter]:
    return [f for i, f in enumerate(filters) if i != index]


def filter_args(filters: Iterable[ActiveFilter]) -> dict:
    return {f"filter_{f.column_key}": f.value for f in filters if f.value}


def parse_sort(args: Mapping[str, str], columns: Sequence[ColumnDef]):
    """Return (key, direction); keys that are not sortable columns are dropped."""
    sortable = {c.key for c in columns if c.sortable}
    key = args.get("sort") or None
    if key not in sortable:
        key = None
    direction = DESC if args.get("dir") == DESC else ASC
    return key, direction


def build_table(columns: Sequence[ColumnDef], rows: Sequence[dict],
                sort_key: Optional[str] = None, sort_dir: str = ASC) -> TableView:
    headers = []
    for column in columns:
        is_sorted = column.sortable and column.key == sort_key
        headers.append(
            HeaderCell(
                key=column.key,
                header=column.header,
                sortable=column.sortable,
                sorted=sort_dir if is_sorted else None,
                next_direction=DESC if is_sorted and sort_dir == ASC else ASC,
            )
        )
    return TableView(headers=headers, columns=list(columns), rows=list(rows))
