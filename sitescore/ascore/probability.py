"""
Random match probability model.

The number of observed peaks matching a theoretical spectrum by chance is
modelled as Binomial(N, p) where N is the number of theoretical peaks and p
the probability of a single random match.
"""

import sys
import math
from math import comb
from typing import List

from pyopenms import MSSpectrum


def cumulative_match_probability(N: int, n: int, p: float) -> float:
    """
    Probability of matching at least n of N ions by chance, P(X >= n).

    Computed as sum_{k=n..N} C(N,k) p^k (1-p)^(N-k). Returns 1.0 when
    nothing matched.

    Raises:
        ValueError: if n is not in [0, N] or p is not a probability.
    """
    if n < 0 or n > N:
        raise ValueError(
            f"The number of matched ions (n={n}) can be at most as large as "
            f"the number of trials (N={N})"
        )
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"p must be a probability [0,1], got {p}")

    # bad p value if nothing has been matched
    if n == 0:
        return 1.0

    score = 0.0
    for k in range(n, N + 1):
        score += comb(N, k) * p**k * (1.0 - p) ** (N - k)
    return score


def number_of_matched_ions(
    th: MSSpectrum,
    window: MSSpectrum,
    depth: int,
    fragment_mass_tolerance: float,
    fragment_tolerance_ppm: bool,
) -> int:
    """
    Count the ``depth`` most intense window peaks that match a theoretical peak.

    Each window peak is compared against its nearest theoretical peak; the
    error is absolute, or relative to the theoretical m/z in ppm, and must be
    strictly below the tolerance. ``th`` has to be sorted by position.
    """
    if th.size() == 0:
        return 0

    n = 0
    for i in range(min(depth, window.size())):
        observed_mz = window[i].getMZ()
        theo_mz = th[th.findNearest(observed_mz)].getMZ()
        error = abs(theo_mz - observed_mz)

        if fragment_tolerance_ppm:
            error = error / theo_mz * 1e6

        if error < fragment_mass_tolerance:
            n += 1
    return n


def total_matched_ions(
    th: MSSpectrum,
    windows: List[MSSpectrum],
    depth: int,
    fragment_mass_tolerance: float,
    fragment_tolerance_ppm: bool,
) -> int:
    """Matched ions summed over all windows at one peak depth."""
    return sum(
        number_of_matched_ions(th, window, depth, fragment_mass_tolerance, fragment_tolerance_ppm)
        for window in windows
    )


def probability_score(P: float) -> float:
    """-10 * log10(P); abs avoids -0.0 when P is exactly 1."""
    # a sum that underflowed to 0.0 is scored as the smallest normal float
    return abs(-10.0 * math.log10(max(P, sys.float_info.min)))
