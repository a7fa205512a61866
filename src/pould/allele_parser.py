"""
Décomposition des noms d'allèles de type [PREFIX-]LOCUS*VARIANT.

Aucune validation de nomenclature n'est faite : les allèles inhabituels
(HLA-A*NULL, HLA-DRB1*NoMatch, ...) sont des valeurs distinctes comme les autres.
"""

from collections import namedtuple

from .config import ALLELE_MARKER, PREFIX_DELIMITER, FIELD_DELIMITER, LOCUS_DELIMITER

ParsedAllele = namedtuple('ParsedAllele', ['prefix', 'locus', 'variant'])


def truncate_allele(variant, trunc):
    """
    Tronque un nom d'allèle à ses `trunc` premiers champs.

    >>> truncate_allele('01:01:01:02N', 2)
    '01:01'
    >>> truncate_allele('01:01', 3)
    '01:01'
    """
    if trunc <= 0:
        return variant
    fields = variant.split(FIELD_DELIMITER)
    if len(fields) <= trunc:
        return variant
    return FIELD_DELIMITER.join(fields[:trunc])


def parse_allele(token, trunc=0):
    """
    Sépare un allèle en (préfixe, locus, variant).

    Parameters
    ----------
    token : str
        Ex: 'HLA-DRB1*15:01:01' ou 'KIR2DL1*001'
    trunc : int
        Nombre de champs gardés dans le variant (0 = tous)

    Returns
    -------
    ParsedAllele
        prefix='' si l'allèle n'a pas de préfixe, locus='' si le marqueur
        '*' est absent (le token entier est alors le variant).
    """
    token = token.strip()
    marker = token.find(ALLELE_MARKER)
    if marker < 0:
        return ParsedAllele('', '', truncate_allele(token, trunc))

    locus_part = token[:marker]
    variant = truncate_allele(token[marker + 1:], trunc)

    dash = locus_part.find(PREFIX_DELIMITER)
    if dash < 0:
        return ParsedAllele('', locus_part, variant)
    return ParsedAllele(locus_part[:dash + 1], locus_part[dash + 1:], variant)


def split_haplotype(strand, trunc=0):
    """Découpe un haplotype '~'-délimité en liste de ParsedAllele (tokens vides ignorés)."""
    return [parse_allele(tok, trunc) for tok in strand.split(LOCUS_DELIMITER)
            if tok.strip()]
