from src.ui.badges import STATUS_MAP, status_style, initials, hash_to_hue, avatar_style
from src.ui.cards import StatCard, LogEvent, percent_delta, humanize_age
from src.ui.pagination import Page, paginate, chip_window, parse_page
from src.ui.tables import (
    ColumnDef,
    FilterColumn,
    FilterOption,
    ActiveFilter,
    search_rows,
    apply_filters,
    sort_rows,
    parse_filters,
    parse_sort,
    remove_filter,
    filter_args,
    build_table,
)
