import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from pyopenms import AASequence, MSSpectrum, PeptideHit

from ..config import AScoreConfig
from .constants import MAX_PEAK_DEPTH, PHOSPHO_MOD
from .probability import cumulative_match_probability, probability_score, total_matched_ions
from .sites import (
    compute_permutations,
    get_sites,
    is_phospho_site,
    number_of_permutations,
    number_of_phospho_events,
    remove_phosphosites_from_sequence,
)
from .spectra import TheoreticalSpectrumSynthesizer, spectrum_difference
from .windows import peak_picking_per_windows_in_spectrum

logger = logging.getLogger(__name__)


@dataclass
class ProbablePhosphoSites:
    """A phosphorylated site of the best permutation and its closest competitor."""

    first: int  # site in the best permutation
    seq_1: int  # index of the best permutation
    seq_2: int = -1  # index of the competitor without the site
    second: int = -1  # site the competitor uses instead
    peak_depth: int = 1


class AScore:
    """
    AScore algorithm for phosphorylation site localization.

    Identifies the most probable phosphorylation site(s) for a given peptide
    sequence and MS/MS spectrum, and scores how well every site is separated
    from the next best assignment that moves it.
    """

    def __init__(
        self,
        fragment_mass_tolerance: float = 0.05,
        fragment_tolerance_ppm: bool = False,
        max_peptide_length: int = 40,
        max_permutations: int = 16384,
    ):
        self.fragment_mass_tolerance_ = fragment_mass_tolerance
        self.fragment_tolerance_ppm_ = fragment_tolerance_ppm
        self.max_peptide_length_ = max_peptide_length
        self.max_permutations_ = max_permutations

        self.synthesizer_ = TheoreticalSpectrumSynthesizer()

    @classmethod
    def from_config(cls, config: Optional[AScoreConfig] = None) -> "AScore":
        config = config or AScoreConfig()
        return cls(
            fragment_mass_tolerance=float(config["fragment_mass_tolerance"]),
            fragment_tolerance_ppm=config.fragment_tolerance_ppm,
            max_peptide_length=int(config["max_peptide_length"]),
            max_permutations=int(config["max_permutations"]),
        )

    def compute(self, hit: PeptideHit, real_spectrum: MSSpectrum) -> PeptideHit:
        """
        Compute AScore and return a rescored copy of hit.

        The copy carries the best weighted peptide score as its score and the
        best scoring phosphorylation assignment as its sequence. The original
        sequence is stored as ``search_engine_sequence`` and every site of the
        best assignment gets an ``AScore_<rank>`` meta value plus a
        ``ProForma`` string with site localization probabilities.

        If the spectrum is empty, or the peptide is too long or has too many
        permutations to score, the copy is returned with score 0 and nothing
        else changed. ``real_spectrum`` is sorted in place.
        """
        phospho = PeptideHit(hit)
        phospho.setScore(0.0)

        sequence_str = phospho.getSequence().toString()
        number_of_phosphorylation_events = number_of_phospho_events(sequence_str)
        seq_without_phospho = remove_phosphosites_from_sequence(sequence_str)

        sites = get_sites(seq_without_phospho)
        number_of_sites = len(sites)

        if number_of_sites < number_of_phosphorylation_events:
            logger.debug(
                f"{sequence_str}: {number_of_phosphorylation_events} phosphorylations "
                f"but only {number_of_sites} sites, clamping"
            )
            number_of_phosphorylation_events = number_of_sites

        if real_spectrum.size() == 0:
            logger.debug(f"{sequence_str}: empty spectrum, skipping")
            return phospho

        if 0 < self.max_peptide_length_ < seq_without_phospho.size():
            logger.warning(
                f"{sequence_str}: peptide longer than {self.max_peptide_length_} residues, skipping"
            )
            return phospho

        n_permutations = number_of_permutations(number_of_sites, number_of_phosphorylation_events)
        if 0 < self.max_permutations_ < n_permutations:
            logger.warning(
                f"{sequence_str}: {n_permutations} permutations exceed "
                f"maximum of {self.max_permutations_}, skipping"
            )
            return phospho

        permutations = compute_permutations(sites, number_of_phosphorylation_events)
        if permutations:
            th_spectra = self.createTheoreticalSpectra_(permutations, seq_without_phospho)
        else:
            th_spectra = [self.synthesizer_.synthesize_unmodified(seq_without_phospho)]

        windows_top10 = peak_picking_per_windows_in_spectrum(real_spectrum)

        peptide_site_scores = self.calculatePermutationPeptideScores_(th_spectra, windows_top10)
        ranking = self.rankWeightedPermutationPeptideScores_(peptide_site_scores)

        best_score, best_permutation_idx = ranking[-1]
        phospho.setScore(best_score)
        phospho.setSequence(AASequence.fromString(th_spectra[best_permutation_idx].getName()))
        phospho.setMetaValue("search_engine_sequence", sequence_str)

        if (
            number_of_phosphorylation_events == 0
            or number_of_sites == 0
            or number_of_sites == number_of_phosphorylation_events
        ):
            return phospho

        phospho_sites = self.determineHighestScoringPermutations_(
            peptide_site_scores, permutations, ranking
        )

        site2score = {}
        for rank, phospho_site in enumerate(phospho_sites, start=1):
            site_score = self.computeSiteScore_(th_spectra, phospho_site, windows_top10)
            logger.debug(
                f"{sequence_str}: site {phospho_site.first} vs {phospho_site.second} "
                f"at depth {phospho_site.peak_depth}: {site_score}"
            )
            phospho.setMetaValue(f"AScore_{rank}", site_score)
            site2score[phospho_site.first] = site_score

        phospho.setMetaValue(
            "ProForma", self.generateProFormaString_(phospho.getSequence(), site2score)
        )
        return phospho

    def createTheoreticalSpectra_(
        self, permutations: List[List[int]], seq_without_phospho: AASequence
    ) -> List[MSSpectrum]:
        """One theoretical spectrum per permutation, in permutation order."""
        return [
            self.synthesizer_.synthesize(seq_without_phospho, permutation)
            for permutation in permutations
        ]

    def calculatePermutationPeptideScores_(
        self, th_spectra: List[MSSpectrum], windows_top10: List[MSSpectrum]
    ) -> List[List[float]]:
        """Score every theoretical spectrum at peak depths 1..10."""
        permutation_peptide_scores = []

        for spectrum in th_spectra:
            # all b- and y-ions are the trials
            N = spectrum.size()
            scores = []
            for depth in range(1, MAX_PEAK_DEPTH + 1):
                n = total_matched_ions(
                    spectrum,
                    windows_top10,
                    depth,
                    self.fragment_mass_tolerance_,
                    self.fragment_tolerance_ppm_,
                )
                p = depth / 100.0
                # several observed peaks can match the same theoretical ion
                scores.append(probability_score(cumulative_match_probability(N, min(n, N), p)))
            permutation_peptide_scores.append(scores)

        return permutation_peptide_scores

    @staticmethod
    def peptideScore_(scores: List[float]) -> float:
        """Weighted average of the per depth scores."""
        if len(scores) != MAX_PEAK_DEPTH:
            raise ValueError("Scores vector must contain a score for every peak depth")

        return (
            scores[0] * 0.5
            + scores[1] * 0.75
            + scores[2]
            + scores[3]
            + scores[4]
            + scores[5]
            + scores[6] * 0.75
            + scores[7] * 0.5
            + scores[8] * 0.25
            + scores[9] * 0.25
        ) / 10.0

    def rankWeightedPermutationPeptideScores_(
        self, peptide_site_scores: List[List[float]]
    ) -> List[Tuple[float, int]]:
        """
        (weighted score, permutation index) pairs in ascending score order.

        The sort is stable, so among equal scores the highest index ranks
        last, i.e. best.
        """
        ranking = [
            (self.peptideScore_(scores), i) for i, scores in enumerate(peptide_site_scores)
        ]
        ranking.sort(key=lambda x: x[0])
        return ranking

    def determineHighestScoringPermutations_(
        self,
        peptide_site_scores: List[List[float]],
        permutations: List[List[int]],
        ranking: List[Tuple[float, int]],
    ) -> List[ProbablePhosphoSites]:
        """
        Find the closest competitor for every site of the best permutation.

        For each site the ranking is walked from the runner-up downwards to
        the first permutation that keeps all other sites of the best one but
        not this site. The peak depth maximizing the unweighted score
        difference between both permutations is stored with it.

        Raises:
            RuntimeError: if no permutation in the ranking moves the site.
        """
        best_permutation_idx = ranking[-1][1]
        best_peptide_sites = permutations[best_permutation_idx]
        sites = []

        for i, site in enumerate(best_peptide_sites):
            others = [s for j, s in enumerate(best_peptide_sites) if j != i]
            phospho_site = ProbablePhosphoSites(first=site, seq_1=best_permutation_idx)

            for _, candidate_idx in reversed(ranking[:-1]):
                candidate = permutations[candidate_idx]
                if site not in candidate and all(s in candidate for s in others):
                    phospho_site.seq_2 = candidate_idx
                    break
            else:
                raise RuntimeError(
                    f"No competing permutation without phosphorylation at site {site} "
                    f"among {len(ranking)} ranked permutations"
                )

            for position in permutations[phospho_site.seq_2]:
                if position not in best_peptide_sites:
                    phospho_site.second = position
                    break

            phospho_site.peak_depth = self.maximumScoreDifferenceDepth_(
                peptide_site_scores[phospho_site.seq_1],
                peptide_site_scores[phospho_site.seq_2],
            )
            sites.append(phospho_site)

        return sites

    @staticmethod
    def maximumScoreDifferenceDepth_(first_scores: List[float], second_scores: List[float]) -> int:
        """First peak depth with the largest positive score difference, 1 if there is none."""
        maximum_score_difference = 0.0
        peak_depth = 1

        for depth, (phospho_at_site_score, no_phospho_at_site_score) in enumerate(
            zip(first_scores, second_scores), start=1
        ):
            score_difference = phospho_at_site_score - no_phospho_at_site_score
            if score_difference > maximum_score_difference:
                maximum_score_difference = score_difference
                peak_depth = depth

        return peak_depth

    def computeSiteDeterminingIons_(
        self, th_spectra: List[MSSpectrum], candidates: ProbablePhosphoSites
    ) -> Tuple[MSSpectrum, MSSpectrum]:
        """Ions only in the best permutation's spectrum, and ions only in the competitor's."""
        spectrum_first = th_spectra[candidates.seq_1]
        spectrum_second = th_spectra[candidates.seq_2]

        first_diff = spectrum_difference(
            spectrum_first,
            spectrum_second,
            self.fragment_mass_tolerance_,
            self.fragment_tolerance_ppm_,
        )
        second_diff = spectrum_difference(
            spectrum_second,
            spectrum_first,
            self.fragment_mass_tolerance_,
            self.fragment_tolerance_ppm_,
        )
        return first_diff, second_diff

    def computeSiteScore_(
        self,
        th_spectra: List[MSSpectrum],
        phospho_site: ProbablePhosphoSites,
        windows_top10: List[MSSpectrum],
    ) -> float:
        """Score of the best permutation's site-determining ions minus the competitor's."""
        site_determining_ions = self.computeSiteDeterminingIons_(th_spectra, phospho_site)
        depth = phospho_site.peak_depth
        p = depth / 100.0

        scores = []
        for ions in site_determining_ions:
            n = total_matched_ions(
                ions,
                windows_top10,
                depth,
                self.fragment_mass_tolerance_,
                self.fragment_tolerance_ppm_,
            )
            N = ions.size()
            scores.append(probability_score(cumulative_match_probability(N, min(n, N), p)))

        return scores[0] - scores[1]

    def generateProFormaString_(self, peptide: AASequence, ascores: Dict[int, float]) -> str:
        """ProForma string with a localization probability for every scored site."""
        unmodified_str = peptide.toUnmodifiedString()

        result = ""
        for i, residue in enumerate(unmodified_str):
            result += residue

            if i in ascores and is_phospho_site(residue):
                probability = 1.0 - (10.0 ** (-ascores[i] / 10.0))
                probability = max(0.0, min(1.0, probability))
                result += "[" + PHOSPHO_MOD + "|score={:.4f}]".format(probability)

        return result
