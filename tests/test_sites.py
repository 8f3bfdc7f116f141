"""
Test phosphorylation site enumeration.
"""

from math import comb

import pytest
from pyopenms import AASequence

from sitescore.ascore.sites import (
    compute_permutations,
    get_sites,
    is_phospho_site,
    number_of_permutations,
    number_of_phospho_events,
    remove_phosphosites_from_sequence,
)

pytestmark = pytest.mark.algorithm


def test_is_phospho_site():
    assert all(is_phospho_site(r) for r in "STY")
    assert not any(is_phospho_site(r) for r in "ACDEKPA")


def test_number_of_phospho_events():
    assert number_of_phospho_events("PEPTIDE") == 0
    assert number_of_phospho_events("PEPS(Phospho)IDEK") == 1
    assert number_of_phospho_events("PEPS(Phospho)T(Phospho)IDEY(Phospho)K") == 3


def test_remove_phosphosites_keeps_other_modifications():
    seq = remove_phosphosites_from_sequence("PEPS(Phospho)IDEM(Oxidation)K")
    assert seq.toString() == "PEPSIDEM(Oxidation)K"


def test_get_sites():
    assert get_sites(AASequence.fromString("SPETYK")) == [0, 3, 4]
    assert get_sites(AASequence.fromString("PEPAIDEK")) == []


@pytest.mark.parametrize("n_sites", range(1, 8))
def test_permutations_cardinality(n_sites):
    sites = [2 * i + 1 for i in range(n_sites)]
    for k in range(1, n_sites + 1):
        permutations = compute_permutations(sites, k)

        assert len(permutations) == comb(n_sites, k)
        assert len({tuple(p) for p in permutations}) == len(permutations)
        for permutation in permutations:
            assert len(permutation) == k
            assert set(permutation) <= set(sites)
            assert permutation == sorted(permutation)

        assert number_of_permutations(n_sites, k) == len(permutations)


def test_permutations_trivial_cases():
    assert compute_permutations([1, 4, 6], 0) == []
    assert compute_permutations([1, 4, 6], 1) == [[1], [4], [6]]
    assert compute_permutations([1, 4, 6], 3) == [[1, 4, 6]]
    assert compute_permutations([1, 4], 3) == []
    assert number_of_permutations(3, 0) == 0


def test_permutations_order_first_site_included_first():
    assert compute_permutations([1, 2, 3, 4], 2) == [
        [1, 2], [1, 3], [1, 4], [2, 3], [2, 4], [3, 4]
    ]
