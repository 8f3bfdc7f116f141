"""
Constants and default configuration for AScore.
"""

# Modification tag as rendered by AASequence.toString()
PHOSPHO_MOD = "Phospho"
PHOSPHO_TAG = "(Phospho)"

# Residues that can carry a phosphorylation
PHOSPHO_RESIDUES = ("S", "T", "Y")

# Spectrum windowing
WINDOW_SIZE = 100
MAX_PEAK_DEPTH = 10

# Units for fragment mass tolerance
DALTONS = "Da"
PPM_UNITS = "ppm"

DEFAULT_CONFIG = {
    "fragment_mass_tolerance": 0.05,
    "fragment_mass_unit": DALTONS,
    "max_peptide_length": 40,
    "max_permutations": 16384,
    "threads": 4,
}
