from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from roadtrip_bingo.errors import (
    DuplicateIconIdError,
    EmptyIconPoolError,
    InsufficientIconsError,
    InvalidGridSizeError,
    InvalidOptionsError,
    UnknownDifficultyError,
)
from roadtrip_bingo.feasibility import (
    center_blank_applies,
    check_icon_pool,
    required_icon_count,
    validate_grid_size,
    validate_options,
)
from roadtrip_bingo.models import GenerationOptions, IconRef


def make_icons(count: int) -> list[IconRef]:
    return [IconRef(id=f"icon-{i}", name=f"Icon {i}") for i in range(count)]


@given(
    grid_size=st.integers(min_value=3, max_value=8),
    leave_center_blank=st.booleans(),
)
def test_required_icon_count_property(grid_size, leave_center_blank):
    blank = grid_size % 2 == 1 and grid_size >= 5 and leave_center_blank
    expected = grid_size * grid_size - 1 if blank else grid_size * grid_size
    assert required_icon_count(grid_size, leave_center_blank) == expected


def test_three_by_three_never_gets_center_blank():
    assert center_blank_applies(3) is False
    assert required_icon_count(3, True) == 9


def test_even_grids_never_get_center_blank():
    for size in (4, 6, 8):
        assert center_blank_applies(size) is False
        assert required_icon_count(size, True) == size * size


def test_check_icon_pool_reports_requirement():
    report = check_icon_pool(icon_count=20, grid_size=5, leave_center_blank=True)
    assert report.feasible is False
    assert report.required == 24
    assert report.reasons == ["Need at least 24 icons"]

    ok = check_icon_pool(icon_count=24, grid_size=5, leave_center_blank=True)
    assert ok.feasible is True
    assert ok.reasons == []


def test_empty_pool_fails_first():
    # even with an invalid grid size the empty pool is what gets reported
    with pytest.raises(EmptyIconPoolError):
        validate_options(GenerationOptions(icons=[], grid_size=42))


def test_insufficient_icons_carries_requirement():
    with pytest.raises(InsufficientIconsError) as exc:
        validate_options(GenerationOptions(icons=make_icons(10), grid_size=4))
    assert exc.value.required == 16
    assert exc.value.available == 10
    assert "Need at least 16 icons" in str(exc.value)


@pytest.mark.parametrize("grid_size", [2, 9, 0, -1])
def test_grid_size_out_of_range(grid_size):
    with pytest.raises(InvalidGridSizeError):
        validate_options(GenerationOptions(icons=make_icons(100), grid_size=grid_size))


def test_counts_must_be_positive():
    with pytest.raises(InvalidOptionsError):
        validate_options(GenerationOptions(icons=make_icons(9), grid_size=3, set_count=0))
    with pytest.raises(InvalidOptionsError):
        validate_options(GenerationOptions(icons=make_icons(9), grid_size=3, cards_per_set=0))


def test_duplicate_icon_ids_rejected():
    icons = make_icons(9) + [IconRef(id="icon-0", name="again")]
    with pytest.raises(DuplicateIconIdError):
        validate_options(GenerationOptions(icons=icons, grid_size=3))


def test_unknown_difficulty_only_checked_in_multi_hit_mode():
    icons = make_icons(9)
    assert validate_options(GenerationOptions(icons=icons, grid_size=3, difficulty="EXTREME")) == 9
    with pytest.raises(UnknownDifficultyError):
        validate_options(
            GenerationOptions(icons=icons, grid_size=3, multi_hit_mode=True, difficulty="EXTREME")
        )


def test_unknown_rng_engine_rejected():
    with pytest.raises(InvalidOptionsError, match="Unsupported RNG engine"):
        validate_options(GenerationOptions(icons=make_icons(9), grid_size=3, rng_engine="mt19937"))


@pytest.mark.parametrize("seed", [-1, True, "7"])
def test_seed_must_be_non_negative_int(seed):
    with pytest.raises(InvalidOptionsError, match="seed must be a non-negative integer"):
        validate_options(GenerationOptions(icons=make_icons(9), grid_size=3, seed=seed))


def test_grid_size_validated_on_its_own():
    assert validate_grid_size(8) == 8
    with pytest.raises(InvalidGridSizeError):
        validate_grid_size(12)
