"""
Parcours de toutes les paires de loci et assemblage de la table de résultats.

Pour chaque paire (i < j) :
  1. sujets complets < seuil       → ligne 'Not Calculated'
  2. au moins un locus monomorphe  → ligne 'Not Calculated' + loci en cause
  3. sinon : haplotypes (comptage ou EM) puis D', Wn, ALD
"""

import pandas as pd
from tqdm import tqdm

from .config import (
    DEFAULT_THRESHOLD, EM_TOLERANCE, EM_MAX_ITERATIONS,
    LOCUS_DELIMITER, NOT_CALCULATED, NO_VALUE, RESULT_COLUMNS,
)
from .haplotype_estimator import EMConvergenceError, estimate_haplotypes
from .ld_engine import AlleleFrequencies, compute_ld, haplotype_matrix


def iter_locus_pairs(loci):
    """Paires non ordonnées (i < j) dans l'ordre canonique des loci, i en boucle externe."""
    for i in range(len(loci) - 1):
        for j in range(i + 1, len(loci)):
            yield loci[i], loci[j]


def guard_row(threshold, n_complete, reason=NO_VALUE):
    """Colonnes 2 à 6 d'une paire non calculée."""
    return [NOT_CALCULATED, f"Subject Threshold={threshold}",
            f"Complete subjects={n_complete}", reason, '']


def monomorphic_message(freqs_a, freqs_b):
    """'<A> is monomorphic. <B> is monomorphic.' pour chaque locus monomorphe."""
    return ' '.join(f"{f.locus} is monomorphic." for f in (freqs_a, freqs_b)
                    if f.is_monomorphic)


class PairScanner:
    """Analyse LD de toutes les paires de loci d'une LocusTable."""

    def __init__(self, locus_table, threshold=DEFAULT_THRESHOLD, phased=True,
                 exporter=None, em_tolerance=EM_TOLERANCE,
                 em_max_iterations=EM_MAX_ITERATIONS):
        """
        Parameters
        ----------
        locus_table : LocusTable
        threshold : int
            Nombre minimal de sujets complets (< 1 ramené à 1)
        phased : bool
        exporter : VectorExporter, optional
            Si fourni, un vecteur d'haplotypes est écrit par paire calculée
        """
        self.locus_table = locus_table
        self.threshold = max(int(threshold), 1)
        self.phased = phased
        self.exporter = exporter
        self.em_tolerance = em_tolerance
        self.em_max_iterations = em_max_iterations

    def analyze_pair(self, locus_a, locus_b):
        """
        Colonnes 2 à 6 du résultat d'une paire : 5 valeurs LD ou ligne de garde.
        """
        pair = self.locus_table.complete_slice(locus_a, locus_b)
        n_complete = len(pair)
        if n_complete < self.threshold:
            return guard_row(self.threshold, n_complete)

        rows = pair.to_numpy(dtype=object)
        freqs_a = AlleleFrequencies.from_strands(locus_a.name, rows[:, 0], rows[:, 1])
        freqs_b = AlleleFrequencies.from_strands(locus_b.name, rows[:, 2], rows[:, 3])
        if freqs_a.is_monomorphic or freqs_b.is_monomorphic:
            return guard_row(self.threshold, n_complete,
                             monomorphic_message(freqs_a, freqs_b))

        try:
            estimate = estimate_haplotypes(rows, phased=self.phased,
                                           tolerance=self.em_tolerance,
                                           max_iterations=self.em_max_iterations)
            result = compute_ld(estimate.frequencies, freqs_a, freqs_b,
                                estimate.n_haplotypes)
        except (EMConvergenceError, ValueError) as exc:
            return guard_row(self.threshold, n_complete, str(exc))

        if self.exporter is not None:
            matrix = haplotype_matrix(estimate.frequencies, freqs_a, freqs_b)
            self.exporter.export(freqs_a, freqs_b, matrix, estimate.n_haplotypes)
        return result.as_row()

    def scan(self):
        """
        Table des résultats, une ligne par paire de loci.

        Returns
        -------
        DataFrame avec les colonnes RESULT_COLUMNS
        """
        loci = self.locus_table.loci
        pairs = list(iter_locus_pairs(loci))
        records = []
        for locus_a, locus_b in tqdm(pairs, desc="      Paires", leave=False):
            label = f"{locus_a.name}{LOCUS_DELIMITER}{locus_b.name}"
            records.append([label] + self.analyze_pair(locus_a, locus_b))
        return pd.DataFrame(records, columns=RESULT_COLUMNS, dtype=object)
