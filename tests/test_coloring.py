import pickle

import pytest

from mandelrender import ColorMode, ColorPolicy, EscapeResult, colorize
from mandelrender.coloring import PALETTE_SIZE, spectrum_pixel

INSIDE = EscapeResult(escaped=False, iterations=10)


@pytest.fixture(params=["grayscale", "spectrum", "gray-colormap"])
def policy(request):
    if request.param == "grayscale":
        return ColorPolicy.grayscale()
    if request.param == "spectrum":
        return ColorPolicy.spectrum()
    return ColorPolicy.from_colormap("gray")


def test_inside_points_are_black(policy):
    assert colorize(INSIDE, 10, policy) == (0, 0, 0)


def test_colorize_is_deterministic(policy):
    result = EscapeResult(escaped=True, iterations=7)
    assert colorize(result, 20, policy) == colorize(result, 20, policy)


@pytest.mark.parametrize(
    "iterations, budget, expected",
    [
        (0, 10, (0, 0, 0)),
        (1, 10, (26, 26, 26)),
        (5, 10, (128, 128, 128)),
        (9, 10, (230, 230, 230)),
        (249, 250, (254, 254, 254)),
    ],
)
def test_grayscale_levels(iterations, budget, expected):
    result = EscapeResult(escaped=True, iterations=iterations)
    assert colorize(result, budget, ColorPolicy.grayscale()) == expected


@pytest.mark.parametrize(
    "iterations, budget, expected",
    [
        (0, 10, (0, 0, 0)),
        (1, 4, (0x40, 0x00, 0x00)),
        (1, 2, (0x80, 0x00, 0x00)),
        (1, 3, (0x55, 0x55, 0x55)),
    ],
)
def test_spectrum_channels(iterations, budget, expected):
    result = EscapeResult(escaped=True, iterations=iterations)
    assert colorize(result, budget, ColorPolicy.spectrum()) == expected


def test_spectrum_splits_24_bit_value():
    assert spectrum_pixel(0x123456 / 0xFFFFFF) == (0x12, 0x34, 0x56)


def test_from_flag():
    assert ColorPolicy.from_flag(False).mode is ColorMode.GRAYSCALE
    assert ColorPolicy.from_flag(True).mode is ColorMode.SPECTRUM


def test_builtin_policies_have_no_colormap_name():
    assert ColorPolicy.grayscale().name is None
    assert ColorPolicy.spectrum().describe() == "spectrum"


def test_colormap_palette():
    policy = ColorPolicy.from_colormap("gray")
    assert policy.mode is ColorMode.COLORMAP
    assert len(policy.palette) == PALETTE_SIZE
    assert policy.palette[0] == (0, 0, 0)
    assert policy.palette[-1] == (255, 255, 255)
    assert all(0 <= channel <= 255 for color in policy.palette for channel in color)
    assert policy.describe() == "colormap 'gray'"


def test_colormap_indexes_palette_by_ratio():
    policy = ColorPolicy.from_colormap("viridis")
    assert colorize(EscapeResult(True, 0), 100, policy) == policy.palette[0]
    assert colorize(EscapeResult(True, 50), 100, policy) == policy.palette[128]
    assert colorize(EscapeResult(True, 99), 100, policy) == policy.palette[253]


def test_colormap_can_paint_escaped_points_black():
    policy = ColorPolicy.from_colormap("gray")
    escaped = EscapeResult(escaped=True, iterations=0)
    assert colorize(escaped, 100, policy) == colorize(INSIDE, 100, policy)


def test_unknown_colormap():
    with pytest.raises(ValueError, match="unknown colormap"):
        ColorPolicy.from_colormap("definitely-not-a-colormap")


def test_policies_survive_pickling(policy):
    assert pickle.loads(pickle.dumps(policy)) == policy
