"""
Phosphorylation site enumeration.

Extracts candidate S/T/Y positions from a peptide and builds every
assignment of a given number of phosphorylations to those positions.
"""

from math import comb
from typing import List

from pyopenms import AASequence

from .constants import PHOSPHO_RESIDUES, PHOSPHO_TAG


def is_phospho_site(residue: str) -> bool:
    """Check if residue can carry a phosphorylation (S, T, Y)."""
    return residue in PHOSPHO_RESIDUES


def number_of_phospho_events(sequence: str) -> int:
    """Count phosphorylation tags in a rendered sequence string."""
    return sequence.count(PHOSPHO_TAG)


def remove_phosphosites_from_sequence(sequence: str) -> AASequence:
    """Return the peptide with all phosphorylations removed, other modifications kept."""
    return AASequence.fromString(sequence.replace(PHOSPHO_TAG, ""))


def get_sites(without_phospho: AASequence) -> List[int]:
    """0-based positions of all S/T/Y residues, in sequence order."""
    unmodified = without_phospho.toUnmodifiedString()
    return [i for i, residue in enumerate(unmodified) if is_phospho_site(residue)]


def number_of_permutations(n_sites: int, n_events: int) -> int:
    """Number of site sets compute_permutations() will return."""
    if n_events <= 0 or n_events > n_sites:
        return 0
    return comb(n_sites, n_events)


def compute_permutations(sites: List[int], n_phosphorylation_events: int) -> List[List[int]]:
    """
    Generate all n_phosphorylation_events sized subsets of sites.

    Sets containing the first site come first, followed by the sets
    without it; each set keeps the ascending order of ``sites``.
    An event count of 0 yields no permutations at all.
    """
    if n_phosphorylation_events == 0 or n_phosphorylation_events > len(sites):
        return []
    if n_phosphorylation_events == 1:
        return [[site] for site in sites]
    if len(sites) == n_phosphorylation_events:
        return [list(sites)]

    head = sites[0]
    tail = sites[1:]

    permutations = [
        [head] + rest
        for rest in compute_permutations(tail, n_phosphorylation_events - 1)
    ]
    permutations.extend(compute_permutations(tail, n_phosphorylation_events))
    return permutations
