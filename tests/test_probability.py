"""
Test the random match probability model.
"""

import math

import pytest
from pyopenms import MSSpectrum

from sitescore.ascore.probability import (
    cumulative_match_probability,
    number_of_matched_ions,
    probability_score,
    total_matched_ions,
)

pytestmark = pytest.mark.algorithm

PROBABILITIES = [0.0, 0.01, 0.05, 0.1, 0.5, 0.9, 1.0]


@pytest.mark.parametrize("N", [0, 1, 5, 20, 60])
@pytest.mark.parametrize("p", PROBABILITIES)
def test_no_match_is_certain(N, p):
    assert cumulative_match_probability(N, 0, p) == 1.0


@pytest.mark.parametrize("N", [1, 5, 20, 60])
@pytest.mark.parametrize("p", PROBABILITIES)
def test_all_matched(N, p):
    assert cumulative_match_probability(N, N, p) == pytest.approx(p**N, rel=1e-9, abs=1e-300)


def test_known_value():
    # P(X >= 1) for Binomial(2, 0.5)
    assert cumulative_match_probability(2, 1, 0.5) == pytest.approx(0.75)
    assert cumulative_match_probability(3, 2, 0.1) == pytest.approx(3 * 0.01 * 0.9 + 0.001)


def test_non_increasing_in_n():
    N, p = 25, 0.07
    values = [cumulative_match_probability(N, n, p) for n in range(N + 1)]
    assert all(a >= b for a, b in zip(values, values[1:]))


def test_non_decreasing_in_p():
    N, n = 25, 4
    values = [cumulative_match_probability(N, n, i / 100.0) for i in range(101)]
    assert all(a <= b + 1e-15 for a, b in zip(values, values[1:]))


@pytest.mark.parametrize("N,n,p", [(3, 4, 0.1), (3, -1, 0.1), (3, 1, -0.01), (3, 1, 1.01)])
def test_preconditions(N, n, p):
    with pytest.raises(ValueError):
        cumulative_match_probability(N, n, p)


def test_probability_score():
    assert probability_score(0.01) == pytest.approx(20.0)
    score = probability_score(1.0)
    assert score == 0.0
    assert math.copysign(1.0, score) == 1.0
    assert math.isfinite(probability_score(0.0))


@pytest.fixture
def theoretical(spectrum_factory):
    return spectrum_factory([100.0, 200.0, 300.0])


@pytest.fixture
def window(spectrum_factory):
    # ordered by decreasing intensity like a picked window
    return spectrum_factory([200.01, 150.0, 300.2], [1000.0, 500.0, 100.0])


def test_matched_ions_by_depth(theoretical, window):
    assert number_of_matched_ions(theoretical, window, 1, 0.05, False) == 1
    assert number_of_matched_ions(theoretical, window, 2, 0.05, False) == 1
    assert number_of_matched_ions(theoretical, window, 3, 0.05, False) == 1
    assert number_of_matched_ions(theoretical, window, 10, 0.5, False) == 2


def test_matched_ions_ppm(theoretical, window):
    # 200.01 is 50 ppm away from 200.0
    assert number_of_matched_ions(theoretical, window, 1, 20.0, True) == 0
    assert number_of_matched_ions(theoretical, window, 1, 60.0, True) == 1


def test_matched_ions_empty_inputs(theoretical, window):
    assert number_of_matched_ions(MSSpectrum(), window, 10, 0.05, False) == 0
    assert number_of_matched_ions(theoretical, MSSpectrum(), 10, 0.05, False) == 0


def test_total_matched_ions(theoretical, window, spectrum_factory):
    second = spectrum_factory([99.98, 120.0], [10.0, 5.0])
    assert total_matched_ions(theoretical, [window, second], 1, 0.05, False) == 2
    assert total_matched_ions(theoretical, [], 1, 0.05, False) == 0
