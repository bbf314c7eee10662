from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from roadtrip_bingo.layout import free_space_position, place_icons, sample_card_icons
from roadtrip_bingo.feasibility import required_icon_count
from roadtrip_bingo.models import FilledCell, FreeSpaceCell, IconRef
from roadtrip_bingo.rng import create_rng


def make_icons(count: int) -> list[IconRef]:
    return [IconRef(id=f"icon-{i}", name=f"Icon {i}") for i in range(count)]


def test_sampling_does_not_mutate_pool():
    pool = make_icons(30)
    before = list(pool)
    picked = sample_card_icons(pool, 25, create_rng("py_random", 5))
    assert pool == before
    assert len(picked) == 25
    assert len({icon.id for icon in picked}) == 25


@given(
    grid_size=st.integers(min_value=3, max_value=8),
    leave_center_blank=st.booleans(),
    seed=st.integers(min_value=0, max_value=10_000),
)
def test_placement_fills_row_major_without_repeats(grid_size, leave_center_blank, seed):
    needed = required_icon_count(grid_size, leave_center_blank)
    icons = sample_card_icons(make_icons(70), needed, create_rng("py_random", seed))
    grid = place_icons(icons, grid_size, leave_center_blank)

    assert len(grid) == grid_size
    assert all(len(row) == grid_size for row in grid)
    filled = [cell for row in grid for cell in row if isinstance(cell, FilledCell)]
    # row-major order is preserved
    assert [cell.icon for cell in filled] == icons
    assert len({cell.icon.id for cell in filled}) == needed
    for r, row in enumerate(grid):
        for c, cell in enumerate(row):
            assert (cell.row, cell.col) == (r, c)


def test_five_by_five_center_is_free():
    grid = place_icons(make_icons(24), 5, True)
    assert isinstance(grid[2][2], FreeSpaceCell)
    assert grid[2][2].is_free_space and grid[2][2].icon is None
    free = [cell for row in grid for cell in row if cell.is_free_space]
    assert len(free) == 1


def test_three_by_three_has_no_free_cell_even_when_requested():
    assert free_space_position(3, True) is None
    grid = place_icons(make_icons(9), 3, True)
    assert not any(cell.is_free_space for row in grid for cell in row)


def test_seven_by_seven_center():
    assert free_space_position(7, True) == (3, 3)
    assert free_space_position(7, False) is None


def test_wrong_icon_count_rejected():
    with pytest.raises(ValueError):
        place_icons(make_icons(25), 5, True)


@pytest.mark.parametrize("engine", ["py_random", "numpy_pcg64"])
def test_sampling_is_reproducible_per_seed(engine):
    pool = make_icons(40)
    first = sample_card_icons(pool, 16, create_rng(engine, 21))
    second = sample_card_icons(pool, 16, create_rng(engine, 21))
    assert [icon.id for icon in first] == [icon.id for icon in second]
    assert len({icon.id for icon in first}) == 16
