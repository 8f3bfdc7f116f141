"""
Peak picking per 100 m/z window of an observed spectrum.
"""

import math
import logging
from typing import List

import numpy as np
from pyopenms import MSSpectrum

from .constants import WINDOW_SIZE, MAX_PEAK_DEPTH

logger = logging.getLogger(__name__)


def peak_picking_per_windows_in_spectrum(real_spectrum: MSSpectrum) -> List[MSSpectrum]:
    """
    Split the spectrum into 100 m/z windows and keep the 10 most intense peaks of each.

    Windows span floor(first m/z / 100) * 100 to ceil(last m/z / 100) * 100;
    a peak on a window's upper bound belongs to that window. Peaks inside a
    window are ordered by decreasing intensity, so the first ``d`` peaks are
    the window at peak depth ``d``. Empty windows are kept.

    The spectrum is sorted by position in place if it is not already.
    """
    if real_spectrum.size() == 0:
        raise ValueError("Cannot pick peaks per window in an empty spectrum")

    if not real_spectrum.isSorted():
        real_spectrum.sortByPosition()

    mz, intensity = real_spectrum.get_peaks()
    mz = np.asarray(mz, dtype=np.float64)
    intensity = np.asarray(intensity)

    spect_lower_bound = math.floor(mz[0] / WINDOW_SIZE) * WINDOW_SIZE
    spect_upper_bound = math.ceil(mz[-1] / WINDOW_SIZE) * WINDOW_SIZE
    number_of_windows = int(math.ceil((spect_upper_bound - spect_lower_bound) / WINDOW_SIZE))

    windows_top10 = []
    start = 0
    window_upper_bound = spect_lower_bound + WINDOW_SIZE

    for _ in range(number_of_windows):
        end = int(np.searchsorted(mz, window_upper_bound, side="right"))

        # stable sort keeps ascending m/z among equal intensities
        order = np.argsort(-intensity[start:end], kind="stable")[:MAX_PEAK_DEPTH]

        window = MSSpectrum()
        if len(order):
            window.set_peaks((mz[start:end][order], intensity[start:end][order]))
        windows_top10.append(window)

        start = end
        window_upper_bound += WINDOW_SIZE

    logger.debug(f"Picked peaks in {number_of_windows} windows from {real_spectrum.size()} peaks")
    return windows_top10
