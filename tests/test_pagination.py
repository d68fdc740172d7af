import pytest

from src.ui.pagination import chip_window, paginate, parse_page


def test_last_page_holds_the_remainder():
    page = paginate(list(range(20)), 3, 8)

    assert page.total_pages == 3
    assert page.items == [16, 17, 18, 19]
    assert (page.start_row, page.end_row) == (17, 20)
    assert page.has_previous and not page.has_next
    assert page.summary("patient") == "Showing 17 to 20 of 20 patients"


def test_empty_result_still_has_one_page():
    page = paginate([], 1, 8)

    assert page.total_pages == 1
    assert page.items == []
    assert page.summary("patient") == "Showing 0 to 0 of 0 patients"
    assert not page.has_previous and not page.has_next


def test_singular_label_and_thousands_separator():
    assert paginate(["only"], 1, 8).summary("patient") == "Showing 1 to 1 of 1 patient"
    assert paginate(list(range(1234)), 1, 10).summary() == "Showing 1 to 10 of 1,234 records"


@pytest.mark.parametrize("requested, expected", [(0, 1), (-4, 1), (99, 3)])
def test_page_is_clamped(requested, expected):
    assert paginate(list(range(20)), requested, 8).page == expected


def test_chip_window_centres_current_page():
    assert chip_window(5, 10) == [3, 4, 5, 6, 7]
    assert chip_window(1, 10) == [1, 2, 3, 4, 5]
    assert chip_window(10, 10) == [6, 7, 8, 9, 10]
    assert chip_window(2, 3) == [1, 2, 3]


def test_first_and_last_shortcuts():
    middle = paginate(list(range(100)), 5, 10)
    assert middle.show_first and middle.leading_ellipsis
    assert middle.show_last and middle.trailing_ellipsis

    near_start = paginate(list(range(100)), 2, 10)
    assert not near_start.show_first
    assert near_start.show_last and near_start.trailing_ellipsis

    adjacent = paginate(list(range(60)), 4, 10)
    assert adjacent.chips == [2, 3, 4, 5, 6]
    assert adjacent.show_first and not adjacent.leading_ellipsis
    assert not adjacent.show_last


def test_page_size_must_be_positive():
    with pytest.raises(ValueError):
        paginate([1, 2, 3], 1, 0)


@pytest.mark.parametrize("max_page_chips", [0, -3])
def test_max_page_chips_must_be_positive(max_page_chips):
    with pytest.raises(ValueError):
        paginate([1, 2, 3], 1, 2, max_page_chips=max_page_chips)


def test_single_chip_window():
    page = paginate(list(range(50)), 3, 10, max_page_chips=1)
    assert page.chips == [3]
    assert page.show_first and page.show_last


def test_parse_page():
    assert parse_page("4") == 4
    assert parse_page("-3") == 1
    assert parse_page("abc") == 1
    assert parse_page(None) == 1
