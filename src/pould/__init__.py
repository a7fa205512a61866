"""
pould — Déséquilibre de Liaison pour Données Familiales
========================================================

Calcul de D', Wn et des mesures d'ALD conditionnel (Thomson & Single)
pour toutes les paires de loci de données HLA/KIR familiales, phasées
(comptage direct) ou non phasées (EM).

Modules:
    config: Délimiteurs, sentinelles et paramètres d'analyse
    allele_parser: Décomposition des noms d'allèles
    locus_table: Table des loci à partir des GL Strings
    genotype_parser: Tables de génotypes en colonnes
    haplotype_estimator: Fréquences d'haplotypes (comptage / EM)
    ld_engine: D', Wn et ALD conditionnel
    pair_scanner: Analyse de toutes les paires de loci
    vector_export: Vecteurs d'haplotypes par paire
    data_parser: Chargement des données et pipeline LDWrap
    visualizations: Heat map LD
"""

__version__ = "1.0.0"

from .config import AnalysisConfig
from .allele_parser import parse_allele, truncate_allele
from .locus_table import LocusTable, build_locus_table
from .genotype_parser import parse_genotype_table
from .haplotype_estimator import EMConvergenceError, estimate_haplotypes
from .ld_engine import AlleleFrequencies, compute_ld
from .pair_scanner import PairScanner, iter_locus_pairs
from .vector_export import VectorExporter
from .data_parser import ld_wrap
from .visualizations import plot_ld_heatmap

__all__ = [
    "AnalysisConfig",
    "parse_allele",
    "truncate_allele",
    "LocusTable",
    "build_locus_table",
    "parse_genotype_table",
    "EMConvergenceError",
    "estimate_haplotypes",
    "AlleleFrequencies",
    "compute_ld",
    "PairScanner",
    "iter_locus_pairs",
    "VectorExporter",
    "ld_wrap",
    "plot_ld_heatmap",
]
