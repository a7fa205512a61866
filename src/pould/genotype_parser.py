"""
Normalisation des tables de génotypes en colonnes (deux colonnes par locus).
"""

import re
import warnings

import pandas as pd

from .allele_parser import parse_allele
from .config import MISSING_VALUES
from .locus_table import Locus, LocusTable, detect_prefix

# Suffixes ajoutés aux noms de colonnes dupliqués (pandas '.1', ou '_1'/'_2')
_COLUMN_SUFFIX = re.compile(r'(\.\d+|_[12])$')


def locus_name_from_column(column):
    """'DRB1.1' → 'DRB1', 'HLA-A_2' → 'HLA-A'."""
    return _COLUMN_SUFFIX.sub('', str(column).strip())


def parse_genotype_table(genotypes, trunc=0):
    """
    Convertit une table de génotypes en LocusTable.

    Parameters
    ----------
    genotypes : DataFrame
        Deux colonnes par locus, dans l'ordre. Le nom du locus est celui de la
        première colonne de chaque paire. Les cellules peuvent contenir
        'LOCUS*VARIANT' ou le variant seul ; '', NaN et '****' sont manquants.
    trunc : int
        Troncature des noms d'allèles

    Returns
    -------
    LocusTable ou None si la table n'a pas la bonne structure
    """
    n_cols = genotypes.shape[1]
    if n_cols == 0 or n_cols % 2 != 0:
        warnings.warn(f"La table de génotypes doit avoir deux colonnes par locus "
                      f"({n_cols} colonnes trouvées).")
        return None

    loci = []
    data = {}
    parsed = []
    columns = list(genotypes.columns)
    for k in range(0, n_cols, 2):
        locus = Locus(locus_name_from_column(columns[k]))
        if locus in loci:
            warnings.warn(f"Locus dupliqué dans la table de génotypes: {locus.name}")
            return None
        loci.append(locus)
        for position, dst in ((k, locus.strand1), (k + 1, locus.strand2)):
            values = []
            for cell in genotypes.iloc[:, position]:
                if pd.isna(cell) or str(cell).strip() in MISSING_VALUES:
                    values.append(None)
                    continue
                allele = parse_allele(str(cell), trunc)
                parsed.append(allele)
                values.append(allele.variant)
            data[dst] = values

    table = pd.DataFrame(data, columns=[c for locus in loci for c in locus.columns],
                         dtype=object)
    return LocusTable(table, loci, detect_prefix([a for a in parsed if a.locus]))
