"""
Theoretical spectra for phosphorylation site hypotheses.
"""

from typing import Iterable

from pyopenms import AASequence, MSSpectrum, TheoreticalSpectrumGenerator

from .constants import PHOSPHO_MOD


class TheoreticalSpectrumSynthesizer:
    """
    Builds singly charged b/y ion spectra for a peptide with phosphorylations
    placed at a given set of positions.

    Each spectrum is named with the modified sequence string so the winning
    hypothesis can be turned back into an AASequence.
    """

    def __init__(self):
        self.spectrum_generator_ = TheoreticalSpectrumGenerator()
        p = self.spectrum_generator_.getParameters()
        p.setValue("isotope_model", "none")
        p.setValue("add_first_prefix_ion", "true")
        p.setValue("add_b_ions", "true")
        p.setValue("add_y_ions", "true")
        p.setValue("add_a_ions", "false")
        p.setValue("add_c_ions", "false")
        p.setValue("add_x_ions", "false")
        p.setValue("add_z_ions", "false")
        p.setValue("add_losses", "false")
        p.setValue("add_metainfo", "false")
        p.setValue("add_precursor_peaks", "false")
        p.setValue("add_abundant_immonium_ions", "false")
        self.spectrum_generator_.setParameters(p)

    def synthesize(self, seq_without_phospho: AASequence, site_set: Iterable[int]) -> MSSpectrum:
        """Theoretical spectrum with Phospho set at exactly the positions in site_set."""
        seq = AASequence(seq_without_phospho)
        for position in site_set:
            seq.setModification(position, PHOSPHO_MOD)

        spectrum = MSSpectrum()
        # mono-charged spectra
        self.spectrum_generator_.getSpectrum(spectrum, seq, 1, 1)
        spectrum.sortByPosition()
        spectrum.setName(seq.toString())
        return spectrum

    def synthesize_unmodified(self, seq_without_phospho: AASequence) -> MSSpectrum:
        return self.synthesize(seq_without_phospho, ())


def compare_mz(mz1: float, mz2: float, tolerance: float, tolerance_ppm: bool) -> int:
    """Compare two m/z values: -1 if mz1 is lower, 1 if higher, 0 if within tolerance."""
    error = mz1 - mz2
    if tolerance_ppm:
        avg_mass = (mz1 + mz2) / 2.0
        tolerance = tolerance * avg_mass / 1.0e6

    if error < -tolerance:
        return -1
    elif error > tolerance:
        return 1
    return 0


def spectrum_difference(
    spectrum1: MSSpectrum, spectrum2: MSSpectrum, tolerance: float, tolerance_ppm: bool
) -> MSSpectrum:
    """
    Peaks of spectrum1 that have no counterpart in spectrum2.

    Both spectra must be sorted by position. The result is sorted by position.
    """
    result = MSSpectrum()

    i, j = 0, 0
    while i < spectrum1.size() and j < spectrum2.size():
        mz1 = spectrum1[i].getMZ()
        mz2 = spectrum2[j].getMZ()
        val = compare_mz(mz1, mz2, tolerance, tolerance_ppm)

        if val == -1:
            result.push_back(spectrum1[i])
            i += 1
        elif val == 1:
            j += 1
        else:
            # skip every peak on both sides that matches this pair
            j += 1
            while (
                j < spectrum2.size()
                and compare_mz(mz1, spectrum2[j].getMZ(), tolerance, tolerance_ppm) == 0
            ):
                j += 1

            i += 1
            while (
                i < spectrum1.size()
                and compare_mz(spectrum1[i].getMZ(), mz2, tolerance, tolerance_ppm) == 0
            ):
                i += 1

    while i < spectrum1.size():
        result.push_back(spectrum1[i])
        i += 1

    result.sortByPosition()
    return result
