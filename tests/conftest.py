"""
Test configuration and fixtures for sitescore tests.
"""

import os
import sys

import numpy as np
import pytest
from pyopenms import AASequence, MSSpectrum, PeptideHit

# Add the parent directory to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sitescore import AScore
from sitescore.ascore.spectra import TheoreticalSpectrumSynthesizer


def _make_spectrum(mzs, intensities=None):
    mzs = np.ascontiguousarray(mzs, dtype=np.float64)
    if intensities is None:
        intensities = np.full(len(mzs), 1000.0)
    spectrum = MSSpectrum()
    spectrum.set_peaks((mzs, np.ascontiguousarray(intensities, dtype=np.float32)))
    return spectrum


def _make_hit(sequence, score=10.0):
    hit = PeptideHit()
    hit.setSequence(AASequence.fromString(sequence))
    hit.setScore(score)
    return hit


@pytest.fixture
def spectrum_factory():
    """Build an MSSpectrum from m/z values and optional intensities (default 1000)."""
    return _make_spectrum


@pytest.fixture
def hit_factory():
    """Build a PeptideHit from a sequence string."""
    return _make_hit


@pytest.fixture
def ascore():
    return AScore()


@pytest.fixture(scope="session")
def synthesizer():
    return TheoreticalSpectrumSynthesizer()


@pytest.fixture
def observed_for(synthesizer):
    """Observed spectrum holding exactly the theoretical peaks of one site assignment."""

    def _observed(unmodified, sites):
        th = synthesizer.synthesize(AASequence.fromString(unmodified), sites)
        mzs, _ = th.get_peaks()
        return _make_spectrum(mzs)

    return _observed


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "algorithm: marks tests that test algorithm functionality")
    config.addinivalue_line("markers", "cli: marks tests that test CLI functionality")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
