#!/usr/bin/env python
# -*- coding: utf-8 -*-

import sys
import bisect
import time
import logging
import traceback
from datetime import datetime
from concurrent.futures import ThreadPoolExecutor, as_completed

import click
from pyopenms import (
    FileHandler,
    IdXMLFile,
    MSExperiment,
    MSSpectrum,
    PeptideIdentification,
)

from ..config import AScoreConfig
from .ascore import AScore

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "sitescore"
PRECURSOR_PPM_TOLERANCE = 10
RT_TOLERANCE = 0.1  # seconds


@click.command()
@click.option('-in', '--in-file', 'in_file', required=True,
              help='Input mzML file path', type=click.Path(exists=True))
@click.option('-id', '--id-file', 'id_file', required=True,
              help='Input idXML file path', type=click.Path(exists=True))
@click.option('-out', '--out-file', 'out_file', required=True,
              help='Output idXML file path', type=click.Path())
@click.option('--fragment-mass-tolerance', 'fragment_mass_tolerance', type=float, default=0.05,
              help='Fragment mass tolerance value (default: 0.05)')
@click.option('--fragment-mass-unit', 'fragment_mass_unit', type=click.Choice(['Da', 'ppm']), default='Da',
              help='Tolerance unit (default: Da)')
@click.option('--threads', 'threads', type=int, default=4,
              help='Number of parallel threads (default: 4)')
@click.option('--max-peptide-length', 'max_peptide_length', type=int, default=40,
              help='Skip peptides longer than this, 0 disables (default: 40)')
@click.option('--max-permutations', 'max_permutations', type=int, default=16384,
              help='Skip peptides with more site permutations, 0 disables (default: 16384)')
@click.option('--debug', 'debug', is_flag=True,
              help='Enable debug output and write debug log')
def main(in_file, id_file, out_file, fragment_mass_tolerance, fragment_mass_unit,
         threads, max_peptide_length, max_permutations, debug):
    """
    Phosphorylation site localization scoring tool using AScore algorithm.

    This tool processes MS/MS spectra and peptide identifications to localize
    phosphorylation sites using the AScore algorithm.
    """
    log_file = f"{out_file}.debug.log"
    handler = log_debug(log_file, debug)
    try:
        config = AScoreConfig({
            "fragment_mass_tolerance": fragment_mass_tolerance,
            "fragment_mass_unit": fragment_mass_unit,
            "max_peptide_length": max_peptide_length,
            "max_permutations": max_permutations,
            "threads": threads,
        })

        if debug:
            logger.info("AScore Debug Log")
            logger.info(f"Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
            logger.info(f"Input file: {in_file}")
            logger.info(f"Identification file: {id_file}")
            logger.info(f"Output file: {out_file}")
            logger.info(f"Configuration: {config.to_dict()}")

        exp = load_spectra(in_file)
        protein_ids, peptide_ids = load_identifications(id_file)
        lookup = SpectrumLookup(exp)

        start_time = time.time()
        if max(1, threads) == 1:
            click.echo(f"[{time.strftime('%H:%M:%S')}] Processing {len(peptide_ids)} peptide identifications sequentially...")
        else:
            click.echo(f"[{time.strftime('%H:%M:%S')}] Processing {len(peptide_ids)} peptide identifications using {threads} threads...")
        peptide_ids = rescore_identifications(peptide_ids, lookup, config, threads)

        save_identifications(out_file, protein_ids, peptide_ids)

        processing_time = time.time() - start_time
        click.echo(f"[{time.strftime('%H:%M:%S')}] Processing completed in {processing_time:.2f} seconds")
        logger.info(f"Processing completed in {processing_time:.2f} seconds")

    except Exception as e:
        click.echo(f"Error: {str(e)}")
        logger.error(f"Error: {str(e)}")
        logger.debug(traceback.format_exc())
        sys.exit(1)
    finally:
        if handler is not None:
            logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)
            handler.close()


def log_debug(log_file, debug):
    """Attach a debug log file to the package logger when debug is set."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not debug:
        return None

    handler = logging.FileHandler(log_file)
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    package_logger.addHandler(handler)
    return handler


def load_spectra(mzml_file):
    """Load MS/MS spectra"""
    click.echo(f"[{time.strftime('%H:%M:%S')}] Loading spectra from {mzml_file}")
    exp = MSExperiment()
    FileHandler().loadExperiment(mzml_file, exp)
    click.echo(f"Loaded {exp.size()} spectra")
    return exp


def load_identifications(idxml_file):
    """Load identification results"""
    click.echo(f"[{time.strftime('%H:%M:%S')}] Loading identifications from {idxml_file}")
    protein_ids = []
    peptide_ids = []
    IdXMLFile().load(idxml_file, protein_ids, peptide_ids)
    click.echo(f"Loaded {len(peptide_ids)} peptide identifications")
    return protein_ids, peptide_ids


def save_identifications(out_file, protein_ids, peptide_ids):
    """Save identification results"""
    click.echo(f"[{time.strftime('%H:%M:%S')}] Saving {len(peptide_ids)} peptide identifications to {out_file}")
    IdXMLFile().store(out_file, protein_ids, peptide_ids)


class SpectrumLookup:
    """
    Finds the MS2 spectrum of a peptide identification.

    Identifications are matched by their ``spectrum_reference`` native ID
    first, then by precursor m/z and retention time.
    """

    def __init__(self, exp):
        self.by_native_id = {}
        self.by_precursor = []

        for spec in exp:
            if spec.getMSLevel() != 2:
                continue
            self.by_native_id[spec.getNativeID()] = spec
            if spec.getPrecursors():
                self.by_precursor.append((spec.getPrecursors()[0].getMZ(), spec))

        self.by_precursor.sort(key=lambda x: x[0])
        self.precursor_mzs = [mz for mz, _ in self.by_precursor]

    def find(self, pid):
        if pid.metaValueExists("spectrum_reference"):
            spec = self.by_native_id.get(str(pid.getMetaValue("spectrum_reference")))
            if spec is not None:
                return spec
        return self.find_by_mz(pid.getMZ(), pid.getRT())

    def find_by_mz(self, target_mz, rt=None, ppm_tolerance=PRECURSOR_PPM_TOLERANCE):
        """Closest precursor within ppm_tolerance, optionally within RT_TOLERANCE of rt."""
        if target_mz <= 0:
            return None

        best_spectrum = None
        best_mz_diff = float('inf')

        mz_window = target_mz * ppm_tolerance / 1e6
        lo = bisect.bisect_left(self.precursor_mzs, target_mz - mz_window)
        hi = bisect.bisect_right(self.precursor_mzs, target_mz + mz_window)

        for spec_mz, spec in self.by_precursor[lo:hi]:
            mz_diff_ppm = abs(spec_mz - target_mz) / target_mz * 1e6
            if mz_diff_ppm > ppm_tolerance:
                continue
            if rt is not None and abs(spec.getRT() - rt) > RT_TOLERANCE:
                continue
            if mz_diff_ppm < best_mz_diff:
                best_mz_diff = mz_diff_ppm
                best_spectrum = spec

        return best_spectrum


def process_peptide_identification(pid, lookup, config):
    """
    Rescore every hit of a peptide identification.

    Returns a new PeptideIdentification; the input is left untouched. Without
    a matching spectrum the copy keeps its original hits.
    """
    new_pid = PeptideIdentification(pid)
    new_pid.setScoreType("AScore")
    new_pid.setHigherScoreBetter(True)

    spectrum = lookup.find(pid)
    if spectrum is None:
        logger.warning(f"No spectrum found for m/z={pid.getMZ()}, RT={pid.getRT()}")
        return new_pid

    ascore = AScore.from_config(config)
    new_hits = []
    for hit in pid.getHits():
        # every hit sorts its own copy of the spectrum
        scored_hit = ascore.compute(hit, MSSpectrum(spectrum))
        logger.debug(
            f"{hit.getSequence().toString()} -> {scored_hit.getSequence().toString()} "
            f"score={scored_hit.getScore()}"
        )
        new_hits.append(scored_hit)
    new_pid.setHits(new_hits)
    return new_pid


def rescore_identifications(peptide_ids, lookup, config, threads=1):
    """
    Rescore all identifications, in parallel when threads > 1.

    Results keep the input order. An identification that fails is logged and
    kept unchanged.
    """
    results = list(peptide_ids)

    if max(1, threads) == 1:
        for i, pid in enumerate(peptide_ids):
            try:
                results[i] = process_peptide_identification(pid, lookup, config)
            except Exception as exc:
                _report_failure(pid, exc)
        return results

    with ThreadPoolExecutor(max_workers=threads) as executor:
        future_to_index = {
            executor.submit(process_peptide_identification, pid, lookup, config): i
            for i, pid in enumerate(peptide_ids)
        }

        completed = 0
        for future in as_completed(future_to_index):
            i = future_to_index[future]
            try:
                results[i] = future.result()
            except Exception as exc:
                _report_failure(peptide_ids[i], exc)
            completed += 1
            if completed % 100 == 0:
                logger.debug(f"Completed {completed}/{len(peptide_ids)} peptide identifications")

    return results


def _report_failure(pid, exc):
    click.echo(f"Peptide identification generated an exception: {exc}")
    logger.error(f"Error processing peptide identification m/z={pid.getMZ()}, RT={pid.getRT()}: {exc}")
    logger.debug(traceback.format_exc())


if __name__ == '__main__':
    main()
