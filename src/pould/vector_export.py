"""
Export des vecteurs d'haplotypes (toutes les combinaisons d'allèles d'une paire).
"""

import os
from datetime import datetime

import pandas as pd

from .config import LOCUS_DELIMITER, VECTOR_COLUMNS


class VectorExporter:
    """Écrit un fichier de vecteur d'haplotypes par paire de loci analysée."""

    def __init__(self, output_dir, prefix='', phased=True):
        """
        Parameters
        ----------
        output_dir : str
            Dossier de destination (créé si besoin)
        prefix : str
            Nom du jeu de données, placé en tête des noms de fichiers
        phased : bool
        """
        self.output_dir = output_dir
        self.prefix = os.path.basename(prefix) if prefix else ''
        self.phased = phased
        self.written = []

    def default_name(self, locus_a, locus_b, now=None):
        """<prefix>_<phased|unphased>_<A>~<B>_haplotype_Vector_<date>_<heure>"""
        now = now or datetime.now()
        stamp = now.strftime('%Y-%m-%d_%H-%M-%S-%f')
        head = f"{self.prefix}_{'phased' if self.phased else 'unphased'}_" if self.prefix else ''
        return f"{head}{locus_a}{LOCUS_DELIMITER}{locus_b}_haplotype_Vector_{stamp}"

    def vector_table(self, freqs_a, freqs_b, matrix, n_haplotypes, dataset):
        """
        Table Dataset / Phase / A~B / Frequency / Count, une ligne par
        combinaison d'allèles (allèle A variant le plus vite).
        """
        pair_label = f"{freqs_a.locus}{LOCUS_DELIMITER}{freqs_b.locus}"
        rows = []
        for j, allele_b in enumerate(freqs_b.alleles):
            for i, allele_a in enumerate(freqs_a.alleles):
                freq = matrix[i, j]
                rows.append({
                    'Dataset': dataset,
                    'Phase': str(self.phased).upper(),
                    pair_label: f"{allele_a}{LOCUS_DELIMITER}{allele_b}",
                    'Frequency': freq,
                    'Count': freq * n_haplotypes,
                })
        columns = VECTOR_COLUMNS[:2] + [pair_label] + VECTOR_COLUMNS[2:]
        return pd.DataFrame(rows, columns=columns)

    def export(self, freqs_a, freqs_b, matrix, n_haplotypes, vector_name=None):
        """
        Écrit le vecteur d'une paire et retourne le chemin du fichier.

        Les erreurs d'écriture (OSError) sont propagées.
        """
        if vector_name:
            name = os.path.basename(vector_name)
        else:
            name = self.default_name(freqs_a.locus, freqs_b.locus)
        os.makedirs(self.output_dir, exist_ok=True)
        filepath = os.path.join(self.output_dir, f"{name}.txt")
        table = self.vector_table(freqs_a, freqs_b, matrix, n_haplotypes, name)
        table.to_csv(filepath, sep='\t', index=False)
        self.written.append(filepath)
        return filepath
