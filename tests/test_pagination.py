import pytest

from maintenance_engine.utils.pagination import (
    MAX_PER_PAGE,
    PaginatedResponse,
    PaginationParams,
    paginate_list,
)


def test_offset_and_next():
    params = PaginationParams(page=3, per_page=10)

    assert params.offset == 20
    assert params.next() == PaginationParams(page=4, per_page=10)


@pytest.mark.parametrize("page,per_page", [(0, 10), (1, 0), (1, MAX_PER_PAGE + 1)])
def test_invalid_params(page, per_page):
    with pytest.raises(ValueError):
        PaginationParams(page=page, per_page=per_page)


def test_paginate_list_windows():
    items = list(range(7))

    first = paginate_list(items, PaginationParams(page=1, per_page=3))
    last = paginate_list(items, PaginationParams(page=3, per_page=3))
    beyond = paginate_list(items, PaginationParams(page=4, per_page=3))

    assert first.items == [0, 1, 2]
    assert first.pages == 3
    assert first.has_more
    assert last.items == [6]
    assert not last.has_more
    assert beyond.items == []
    assert beyond.total == 7


def test_empty_response():
    response = PaginatedResponse.create([], 0, PaginationParams())

    assert response.pages == 0
    assert not response.has_more
