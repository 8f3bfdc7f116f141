"""
sitescore: phosphorylation site localization scoring for MS/MS spectra.

This package provides the AScore algorithm and a command line tool that
rescores peptide identifications stored in idXML files.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .ascore import AScore
from .config import AScoreConfig

__all__ = ["AScore", "AScoreConfig"]
