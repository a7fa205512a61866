"""
Construction de la table des loci à partir des GL Strings.

Chaque sujet donne une ligne ; chaque locus occupe deux colonnes,
une par brin (haplotype 1 → colonne de base, haplotype 2 → colonne '_1').
"""

import warnings

import pandas as pd

from .allele_parser import split_haplotype
from .config import STRAND_DELIMITER, STRAND2_SUFFIX, PREFIX_NOT_FOUND


class Locus:
    """Un locus et ses deux colonnes de brin dans la table."""

    def __init__(self, name):
        self.name = name
        self.strand1 = name
        self.strand2 = name + STRAND2_SUFFIX

    @property
    def columns(self):
        return [self.strand1, self.strand2]

    def __eq__(self, other):
        return isinstance(other, Locus) and other.name == self.name

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return f"Locus({self.name})"


def detect_prefix(parsed_alleles):
    """
    Préfixe commun à tous les allèles ('' si aucun).

    Retourne PREFIX_NOT_FOUND si le préfixe n'est pas présent et identique
    sur tous les allèles.
    """
    prefixes = {a.prefix for a in parsed_alleles}
    if not prefixes or prefixes == {''}:
        return ''
    if len(prefixes) == 1:
        return prefixes.pop()
    return PREFIX_NOT_FOUND


def extract_loci(parsed_alleles):
    """
    Liste ordonnée (ordre de première apparition) des loci et préfixe commun.

    Returns
    -------
    loci : list of Locus
    prefix : str ou PREFIX_NOT_FOUND
    """
    seen = {}
    for allele in parsed_alleles:
        if allele.locus and allele.locus not in seen:
            seen[allele.locus] = Locus(allele.locus)
    return list(seen.values()), detect_prefix([a for a in parsed_alleles if a.locus])


class LocusTable:
    """
    Table sujets × (2 colonnes par locus), en lecture seule après construction.
    """

    def __init__(self, table, loci, prefix=''):
        self.table = table
        self.loci = list(loci)
        self.prefix = prefix

    @property
    def locus_names(self):
        return [locus.name for locus in self.loci]

    @property
    def n_samples(self):
        return len(self.table)

    def locus(self, name):
        for locus in self.loci:
            if locus.name == name:
                return locus
        raise KeyError(f"Locus inconnu: {name}")

    def pair_slice(self, locus_a, locus_b):
        """Projection à 4 colonnes : A brin 1, A brin 2, B brin 1, B brin 2."""
        return self.table[locus_a.columns + locus_b.columns]

    def complete_slice(self, locus_a, locus_b):
        """Lignes de la paire sans aucune valeur manquante (sujets complets)."""
        return self.pair_slice(locus_a, locus_b).dropna().reset_index(drop=True)

    def summary(self):
        """Affiche un résumé de la table."""
        prefix = '(incohérent)' if self.prefix is PREFIX_NOT_FOUND else repr(self.prefix)
        print(f"Table des loci: {self.n_samples} sujets, {len(self.loci)} loci")
        print(f"  Préfixe: {prefix}")
        for locus in self.loci:
            n_typed = int(self.table[locus.columns].notna().all(axis=1).sum())
            print(f"    {locus.name}: {n_typed} sujets typés sur les deux brins")


def split_gl_string(gl_string):
    """'<haplotype1>+<haplotype2>' → (haplotype1, haplotype2)."""
    strand1, _, strand2 = str(gl_string).partition(STRAND_DELIMITER)
    return strand1, strand2


def build_locus_table(gl_strings, trunc=0):
    """
    Construit la LocusTable à partir des GL Strings des sujets non-enfants.

    Les deux brins sont découpés indépendamment : un locus présent sur un
    seul brin (ex. DRB3/4/5) laisse la cellule de l'autre brin manquante.

    Parameters
    ----------
    gl_strings : iterable of str
    trunc : int
        Troncature des noms d'allèles (0 = aucune)

    Returns
    -------
    LocusTable
    """
    samples = []
    for gl in gl_strings:
        strand1, strand2 = split_gl_string(gl)
        samples.append((split_haplotype(strand1, trunc), split_haplotype(strand2, trunc)))

    loci, prefix = extract_loci([a for s1, s2 in samples for a in s1 + s2])
    if prefix is PREFIX_NOT_FOUND:
        warnings.warn("Le préfixe de locus n'est pas identique sur tous les allèles.")

    by_name = {locus.name: locus for locus in loci}
    rows = []
    for s1, s2 in samples:
        row = {}
        for allele in s1:
            if allele.locus:
                row[by_name[allele.locus].strand1] = allele.variant
        for allele in s2:
            if allele.locus:
                row[by_name[allele.locus].strand2] = allele.variant
        rows.append(row)

    columns = [col for locus in loci for col in locus.columns]
    table = pd.DataFrame(rows, columns=columns, dtype=object)
    return LocusTable(table, loci, prefix)
