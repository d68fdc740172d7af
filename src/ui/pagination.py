import math
from dataclasses import dataclass, field
from typing import List, Sequence

DEFAULT_MAX_PAGE_CHIPS = 5


@dataclass
class Page:
    items: list
    page: int
    page_size: int
    total_rows: int
    total_pages: int
    start_row: int
    end_row: int
    chips: List[int] = field(default_factory=list)
    show_first: bool = False
    leading_ellipsis: bool = False
    trailing_ellipsis: bool = False
    show_last: bool = False

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def previous_page(self) -> int:
        return max(1, self.page - 1)

    @property
    def next_page(self) -> int:
        return min(self.total_pages, self.page + 1)

    def summary(self, entity_label: str = "record") -> str:
        plural = "" if self.total_rows == 1 else "s"
        return (
            f"Showing {self.start_row:,} to {self.end_row:,} of "
            f"{self.total_rows:,} {entity_label}{plural}"
        )


def chip_window(page: int, total_pages: int, max_page_chips: int = DEFAULT_MAX_PAGE_CHIPS) -> List[int]:
    """Centre the current page in the chip window, shifting left at the end."""
    half = max_page_chips // 2
    window_start = max(1, page - half)
    window_end = min(total_pages, window_start + max_page_chips - 1)
    window_start = max(1, window_end - max_page_chips + 1)
    return list(range(window_start, window_end + 1))


def paginate(rows: Sequence, page: int, page_size: int,
             max_page_chips: int = DEFAULT_MAX_PAGE_CHIPS) -> Page:
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    if max_page_chips <= 0:
        raise ValueError(f"max_page_chips must be positive, got {max_page_chips}")

    total_rows = len(rows)
    total_pages = max(1, math.ceil(total_rows / page_size))
    page = min(max(1, page), total_pages)

    offset = (page - 1) * page_size
    end_row = min(page * page_size, total_rows)
    chips = chip_window(page, total_pages, max_page_chips)

    return Page(
        items=list(rows[offset:end_row]),
        page=page,
        page_size=page_size,
        total_rows=total_rows,
        total_pages=total_pages,
        start_row=min(offset + 1, total_rows),
        end_row=end_row,
        chips=chips,
        show_first=chips[0] > 1,
        leading_ellipsis=chips[0] > 2,
        trailing_ellipsis=chips[-1] < total_pages - 1,
        show_last=chips[-1] < total_pages,
    )


def parse_page(value) -> int:
    try:
        return max(1, int(value))
    except (TypeError, ValueError):
        return 1
