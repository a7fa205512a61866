"""
Moteur de calcul du déséquilibre de liaison pour une paire de loci.

- D' : coefficient normalisé multi-allélique (Hedrick)
- Wn : analogue du V de Cramér, dérivé du χ² haplotypique
- ALD conditionnel : mesures asymétriques de Thomson & Single (2014),
  calculées à partir de l'homozygotie spécifique des haplotypes
"""

import numpy as np


class AlleleFrequencies:
    """Comptages et fréquences alléliques d'un locus sur les 2N observations."""

    def __init__(self, locus, alleles, counts):
        """
        Parameters
        ----------
        locus : str
        alleles : list of str
            Ordre de première apparition
        counts : array-like (k,)
        """
        self.locus = locus
        self.alleles = list(alleles)
        self.counts = np.asarray(counts, dtype=np.float64)
        self.total = self.counts.sum()
        self.freqs = self.counts / self.total if self.total > 0 else self.counts
        self._index = {a: i for i, a in enumerate(self.alleles)}

    @classmethod
    def from_strands(cls, locus, strand1, strand2):
        """Construit la table à partir des deux colonnes (brin 1 puis brin 2)."""
        counts = {}
        for allele in list(strand1) + list(strand2):
            counts[allele] = counts.get(allele, 0) + 1
        return cls(locus, list(counts), list(counts.values()))

    def index(self, allele):
        return self._index[allele]

    def __len__(self):
        return len(self.alleles)

    @property
    def squared(self):
        return self.freqs ** 2

    @property
    def homozygosity(self):
        """F = Σ p_i²"""
        return float(self.squared.sum())

    @property
    def is_monomorphic(self):
        return len(self.alleles) == 1

    def as_table(self):
        """{allèle: (comptage, fréquence, fréquence²)}"""
        return {a: (int(self.counts[i]), self.freqs[i], self.squared[i])
                for i, a in enumerate(self.alleles)}


class LDResult:
    """Résultat LD d'une paire : D', Wn, W(Loc1|Loc2), W(Loc2|Loc1), 2N."""

    def __init__(self, d_prime, wn, ald_1_given_2, ald_2_given_1, n_haplotypes):
        self.d_prime = d_prime
        self.wn = wn
        self.ald_1_given_2 = ald_1_given_2
        self.ald_2_given_1 = ald_2_given_1
        self.n_haplotypes = n_haplotypes

    def as_row(self):
        return [self.d_prime, self.wn, self.ald_1_given_2, self.ald_2_given_1,
                self.n_haplotypes]

    def __repr__(self):
        return (f"LDResult(D'={self.d_prime:.4f}, Wn={self.wn:.4f}, "
                f"W1|2={self.ald_1_given_2:.4f}, W2|1={self.ald_2_given_1:.4f}, "
                f"2N={self.n_haplotypes})")


def haplotype_matrix(hap_freqs, freqs_a, freqs_b):
    """
    Matrice dense allèles(A) × allèles(B) des fréquences d'haplotypes.

    Les haplotypes non observés valent 0.
    """
    matrix = np.zeros((len(freqs_a), len(freqs_b)))
    for (a, b), f in hap_freqs.items():
        matrix[freqs_a.index(a), freqs_b.index(b)] = f
    return matrix


def disequilibrium(matrix, n_haplotypes):
    """
    D' et χ² à partir de la matrice des fréquences d'haplotypes.

    D_ij = h_ij - p_i q_j
    D'   = Σ p_i q_j |D_ij| / Dmax_ij
    χ²   = 2N Σ D_ij² / (p_i q_j)

    Returns
    -------
    d_prime : float
    chi2 : float
    """
    p = matrix.sum(axis=1)
    q = matrix.sum(axis=0)
    expected = np.outer(p, q)
    d = matrix - expected

    dmax = np.where(
        d < 0,
        np.minimum(expected, np.outer(1.0 - p, 1.0 - q)),
        np.minimum(np.outer(p, 1.0 - q), np.outer(1.0 - p, q)),
    )
    ratio = np.divide(np.abs(d), dmax, out=np.zeros_like(d), where=dmax > 0)
    d_prime = float((expected * ratio).sum())

    chi_terms = np.divide(d ** 2, expected, out=np.zeros_like(d), where=expected > 0)
    chi2 = float(n_haplotypes * chi_terms.sum())
    return d_prime, chi2


def wn_statistic(chi2, n_haplotypes, n_alleles_a, n_alleles_b):
    """Wn = sqrt(χ² / (2N · min(k-1, l-1)))"""
    df = min(n_alleles_a - 1, n_alleles_b - 1)
    if df < 1 or n_haplotypes <= 0:
        raise ValueError("Wn non défini pour un locus monomorphe")
    return float(np.sqrt(chi2 / (n_haplotypes * df)))


def conditional_ald(matrix, freqs_a, freqs_b, flip=False):
    """
    ALD conditionnel d'un locus Y sachant le locus de conditionnement X.

    flip=False : X = A (lignes), retourne W(B|A)
    flip=True  : X = B (colonnes), retourne W(A|B)

    F(Y|X=i)  = Σ_j (h_ij / p_i)²
    F(Y|X)    = Σ_i p_i F(Y|X=i)
    W(Y|X)²   = (F(Y|X) - F_Y) / (1 - F_Y)

    Raises
    ------
    ValueError
        Si F_Y = 1 (locus Y monomorphe)
    """
    if flip:
        matrix, freqs_x, freqs_y = matrix.T, freqs_b, freqs_a
    else:
        freqs_x, freqs_y = freqs_a, freqs_b

    f_y = freqs_y.homozygosity
    if f_y >= 1.0:
        raise ValueError(f"ALD non défini : {freqs_y.locus} a une homozygotie de 1")

    p_x = freqs_x.freqs
    conditional = np.divide(matrix, p_x[:, None], out=np.zeros_like(matrix),
                            where=p_x[:, None] > 0)
    hap_specific_f = (conditional ** 2).sum(axis=1)
    weighted_f = float((p_x * hap_specific_f).sum())

    ald_sq = (weighted_f - f_y) / (1.0 - f_y)
    # Erreurs d'arrondi sous l'équilibre de liaison
    return float(np.sqrt(max(ald_sq, 0.0)))


def compute_ld(hap_freqs, freqs_a, freqs_b, n_haplotypes):
    """
    Calcule D', Wn et les deux ALD conditionnels d'une paire de loci.

    W(Loc1|Loc2) est l'ALD du locus 1 conditionné sur le locus 2, W(Loc2|Loc1)
    celui du locus 2 conditionné sur le locus 1 (colonnes inversées par
    rapport à la sortie R de POULD, où "WLoc1/Loc2" conditionne sur le locus 1).

    Parameters
    ----------
    hap_freqs : dict {(allele_A, allele_B): fréquence}
    freqs_a, freqs_b : AlleleFrequencies
    n_haplotypes : int
        2N

    Returns
    -------
    LDResult
    """
    matrix = haplotype_matrix(hap_freqs, freqs_a, freqs_b)
    d_prime, chi2 = disequilibrium(matrix, n_haplotypes)
    wn = wn_statistic(chi2, n_haplotypes, len(freqs_a), len(freqs_b))
    return LDResult(
        d_prime,
        wn,
        conditional_ald(matrix, freqs_a, freqs_b, flip=True),
        conditional_ald(matrix, freqs_a, freqs_b, flip=False),
        n_haplotypes,
    )
