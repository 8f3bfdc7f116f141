"""
AScore package for phosphorylation site localization.

This package provides the AScore algorithm implementation for mass spectrometry
post-translational modification localization.
"""

from .ascore import AScore, ProbablePhosphoSites

__all__ = ["AScore", "ProbablePhosphoSites"]
