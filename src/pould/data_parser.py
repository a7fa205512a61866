"""
Chargement des données familiales et pipeline LDWrap.

Formats d'entrée :
  - CSV avec les colonnes 'Relation' et 'Gl String' (haplotypes phasés)
  - TXT/TSV ou CSV de génotypes en colonnes (deux colonnes par locus)
  - DataFrame pandas de l'un de ces deux formats
"""

import os
import warnings

import pandas as pd

from .config import (
    AnalysisConfig, CHILD_RELATION, GL_STRING_COLUMNS, RELATION_COLUMN,
    DEFAULT_FRAME_NAME, DEFAULT_THRESHOLD, NOT_CALCULATED,
)
from .genotype_parser import parse_genotype_table
from .locus_table import build_locus_table
from .pair_scanner import PairScanner
from .vector_export import VectorExporter


def load_family_table(fam_data, frame_name=DEFAULT_FRAME_NAME):
    """
    Lit les données familiales.

    Parameters
    ----------
    fam_data : DataFrame ou str
        Table en mémoire, ou chemin vers un fichier .csv, .txt ou .tsv
    frame_name : str
        Nom du jeu de données si fam_data est un DataFrame

    Returns
    -------
    table : DataFrame ou None
    label : str
        Nom du jeu de données (nom du fichier sans suffixe)
    """
    if fam_data is None:
        warnings.warn("Please provide a value for the famData parameter.")
        return None, None

    if isinstance(fam_data, pd.DataFrame):
        return fam_data.astype(object), frame_name

    path = str(fam_data)
    stem, suffix = os.path.splitext(os.path.basename(path))
    suffix = suffix.lower()
    if suffix == '.csv':
        table = pd.read_csv(path, dtype=str, keep_default_na=False)
    elif suffix in ('.txt', '.tsv'):
        table = pd.read_csv(path, sep='\t', dtype=str, keep_default_na=False,
                            na_values=['****'])
    else:
        warnings.warn(f"The file name {path} does not have a .csv, .txt or .tsv suffix.")
        return None, None
    return table, stem


def _gl_string_column(headers):
    for name in GL_STRING_COLUMNS:
        if name in headers:
            return name
    return None


def _missing_columns_message(headers, source):
    has_relation = RELATION_COLUMN in headers
    has_gl = _gl_string_column(headers) is not None
    if not has_relation and not has_gl:
        missing = "The 'Relation' and 'Gl String' columns are missing."
    elif not has_gl:
        missing = "The 'Gl String' column is missing."
    else:
        missing = "The 'Relation' column is missing."
    return f"LD Analysis Halted: Your {source} does not contain the proper columns. {missing}"


def build_table(family, trunc=0):
    """
    LocusTable à partir des données familiales (GL Strings ou génotypes).

    Retourne None si aucun des deux formats n'est reconnu.
    """
    headers = list(family.columns)
    gl_column = _gl_string_column(headers)
    if RELATION_COLUMN in headers and gl_column is not None:
        parents = family[family[RELATION_COLUMN] != CHILD_RELATION]
        print(f"  {len(parents)} sujets non-enfants sur {len(family)}")
        return build_locus_table(parents[gl_column], trunc=trunc)
    if RELATION_COLUMN in headers or gl_column is not None:
        # Données familiales incomplètes
        return None
    return parse_genotype_table(family, trunc=trunc)


def write_results(results, output_dir, label, phased):
    """Écrit <label>_<Phased|Unphased>_LD_results.csv et retourne son chemin."""
    os.makedirs(output_dir, exist_ok=True)
    phase = 'Phased' if phased else 'Unphased'
    filepath = os.path.join(output_dir, f"{label}_{phase}_LD_results.csv")
    results.to_csv(filepath, index=False)
    print(f"  → Résultats LD: {filepath}")
    return filepath


def ld_wrap(fam_data, threshold=DEFAULT_THRESHOLD, phased=True,
            frame_name=DEFAULT_FRAME_NAME, trunc=0, write_to=None,
            save_vectors=True):
    """
    Analyse LD de toutes les paires de loci d'un jeu de données familial.

    Écrit la table des résultats (et un vecteur d'haplotypes par paire
    calculée si save_vectors) dans write_to.

    Returns
    -------
    DataFrame des résultats, ou None si l'entrée n'est pas exploitable
    """
    config = AnalysisConfig(threshold=threshold, phased=phased, trunc=trunc,
                            frame_name=frame_name, write_to=write_to,
                            save_vectors=save_vectors)

    print("=" * 60)
    print("CHARGEMENT DES DONNÉES")
    print("=" * 60)
    family, label = load_family_table(fam_data, config.frame_name)
    if family is None:
        return None

    locus_table = build_table(family, trunc=config.trunc)
    if locus_table is None:
        headers = list(family.columns)
        # Sinon table de génotypes rejetée, déjà signalée par le normaliseur
        if RELATION_COLUMN in headers or _gl_string_column(headers) is not None:
            source = 'data frame' if isinstance(fam_data, pd.DataFrame) else 'file'
            warnings.warn(_missing_columns_message(headers, source))
        return None
    if config.trunc > 0:
        label = f"{label}_{config.trunc}-field"
    locus_table.summary()

    print("\n" + "=" * 60)
    print(f"ANALYSE LD ({config.phase_label}, seuil={config.threshold})")
    print("=" * 60)
    exporter = None
    if config.save_vectors:
        exporter = VectorExporter(config.write_to, prefix=label, phased=config.phased)
    scanner = PairScanner(locus_table, threshold=config.threshold,
                          phased=config.phased, exporter=exporter,
                          em_tolerance=config.em_tolerance,
                          em_max_iterations=config.em_max_iterations)
    results = scanner.scan()

    n_done = int((results["D'"] != NOT_CALCULATED).sum())
    print(f"  {len(results)} paires de loci, {n_done} calculées")
    if exporter is not None:
        print(f"  {len(exporter.written)} vecteurs d'haplotypes écrits")

    write_results(results, config.write_to, label, config.phased)
    print("LD Analysis Complete")
    return results
