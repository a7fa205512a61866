"""
Estimation des fréquences d'haplotypes à deux loci.

- Données phasées : comptage direct des 2N haplotypes observés
- Données non phasées : algorithme EM (Excoffier & Slatkin) sur les
  diplotypes compatibles avec chaque génotype
"""

import numpy as np

from .config import EM_TOLERANCE, EM_MAX_ITERATIONS, EM_PRUNE_FREQUENCY


class EMConvergenceError(RuntimeError):
    """L'EM n'a pas convergé dans le nombre d'itérations autorisé."""

    def __init__(self, iterations, delta):
        self.iterations = iterations
        self.delta = delta
        super().__init__(f"EM did not converge after {iterations} iterations "
                         f"(delta={delta:.3g}).")


class HaplotypeEstimate:
    """Table des fréquences d'haplotypes d'une paire de loci."""

    def __init__(self, frequencies, n_haplotypes, iterations=0, converged=True):
        """
        Parameters
        ----------
        frequencies : dict {(allele_A, allele_B): fréquence}
            Ordonné par première apparition
        n_haplotypes : int
            2N, N = nombre de sujets complets
        """
        self.frequencies = frequencies
        self.n_haplotypes = n_haplotypes
        self.iterations = iterations
        self.converged = converged

    def __len__(self):
        return len(self.frequencies)

    def __repr__(self):
        return (f"HaplotypeEstimate({len(self)} haplotypes, "
                f"2N={self.n_haplotypes}, iterations={self.iterations})")


def _as_rows(pair_slice):
    rows = np.asarray(pair_slice, dtype=object)
    if rows.ndim != 2 or rows.shape[1] != 4:
        raise ValueError(f"Une paire de loci doit avoir 4 colonnes, pas {rows.shape}")
    return rows


def count_phased_haplotypes(pair_slice):
    """
    Fréquences empiriques des haplotypes (A1, B1) et (A2, B2) de chaque sujet.

    Returns
    -------
    dict {(allele_A, allele_B): fréquence}
    """
    rows = _as_rows(pair_slice)
    counts = {}
    for a1, a2, b1, b2 in rows:
        counts[(a1, b1)] = counts.get((a1, b1), 0) + 1
    for a1, a2, b1, b2 in rows:
        counts[(a2, b2)] = counts.get((a2, b2), 0) + 1
    total = 2 * len(rows)
    return {hap: n / total for hap, n in counts.items()}


def _diplotype_resolutions(rows):
    """
    Regroupe les génotypes identiques et énumère leurs résolutions de phase.

    Returns
    -------
    haplotypes : list of (allele_A, allele_B), ordre de première apparition
    genotype_counts : array (G,)
    res_genotype, res_h1, res_h2 : arrays (R,)
        Pour chaque résolution : génotype d'origine et indices des 2 haplotypes
    """
    hap_index = {}
    geno_index = {}
    genotype_counts = []
    res_genotype, res_h1, res_h2 = [], [], []

    def idx(hap):
        if hap not in hap_index:
            hap_index[hap] = len(hap_index)
        return hap_index[hap]

    for a1, a2, b1, b2 in rows:
        key = (frozenset((a1, a2)), frozenset((b1, b2)))
        if key in geno_index:
            genotype_counts[geno_index[key]] += 1
            continue
        g = len(genotype_counts)
        geno_index[key] = g
        genotype_counts.append(1)

        resolutions = [((a1, b1), (a2, b2))]
        if a1 != a2 and b1 != b2:
            resolutions.append(((a1, b2), (a2, b1)))
        for h1, h2 in resolutions:
            res_genotype.append(g)
            res_h1.append(idx(h1))
            res_h2.append(idx(h2))

    return (list(hap_index), np.array(genotype_counts, dtype=np.float64),
            np.array(res_genotype, dtype=np.intp),
            np.array(res_h1, dtype=np.intp), np.array(res_h2, dtype=np.intp))


def em_haplotype_frequencies(pair_slice, tolerance=EM_TOLERANCE,
                             max_iterations=EM_MAX_ITERATIONS,
                             prune=EM_PRUNE_FREQUENCY):
    """
    Estimation EM des fréquences d'haplotypes pour des génotypes non phasés.

    Parameters
    ----------
    pair_slice : array-like (N, 4)
        A allèle 1, A allèle 2, B allèle 1, B allèle 2 (sujets complets)
    tolerance : float
        Arrêt quand Σ|p_t - p_{t-1}| < tolerance
    max_iterations : int
    prune : float
        Les haplotypes de fréquence finale < prune sont retirés

    Returns
    -------
    frequencies : dict {(allele_A, allele_B): fréquence}
    iterations : int

    Raises
    ------
    EMConvergenceError
        Si le critère n'est pas atteint après max_iterations itérations
    """
    rows = _as_rows(pair_slice)
    n_samples = len(rows)
    if n_samples == 0:
        return {}, 0
    two_n = 2.0 * n_samples

    haplotypes, geno_counts, res_g, res_h1, res_h2 = _diplotype_resolutions(rows)
    n_hap = len(haplotypes)

    # Prior : produit des fréquences alléliques
    alleles_a = np.concatenate([rows[:, 0], rows[:, 1]])
    alleles_b = np.concatenate([rows[:, 2], rows[:, 3]])
    freq_a = {a: np.count_nonzero(alleles_a == a) / two_n for a in set(alleles_a)}
    freq_b = {b: np.count_nonzero(alleles_b == b) / two_n for b in set(alleles_b)}
    p = np.array([freq_a[a] * freq_b[b] for a, b in haplotypes])
    p /= p.sum()

    # Résolutions hétérozygotes (h1 != h2) comptées deux fois
    het_factor = np.where(res_h1 == res_h2, 1.0, 2.0)

    delta = np.inf
    iteration = 0
    while iteration < max_iterations:
        iteration += 1
        # E-step
        w = het_factor * p[res_h1] * p[res_h2]
        totals = np.bincount(res_g, weights=w, minlength=len(geno_counts))
        post = np.divide(w, totals[res_g], out=np.zeros_like(w), where=totals[res_g] > 0)
        weight = post * geno_counts[res_g]
        # M-step
        expected = (np.bincount(res_h1, weights=weight, minlength=n_hap)
                    + np.bincount(res_h2, weights=weight, minlength=n_hap))
        new_p = expected / two_n
        delta = np.abs(new_p - p).sum()
        p = new_p
        if delta < tolerance:
            break
    else:
        raise EMConvergenceError(iteration, delta)

    keep = p >= prune
    total = p[keep].sum()
    frequencies = {hap: p[i] / total for i, hap in enumerate(haplotypes) if keep[i]}
    return frequencies, iteration


def estimate_haplotypes(pair_slice, phased=True, tolerance=EM_TOLERANCE,
                        max_iterations=EM_MAX_ITERATIONS):
    """
    Table des fréquences d'haplotypes d'une paire de loci.

    `n_haplotypes` vaut toujours 2N, quel que soit le mode d'estimation.
    """
    rows = _as_rows(pair_slice)
    n_haplotypes = 2 * len(rows)
    if phased:
        return HaplotypeEstimate(count_phased_haplotypes(rows), n_haplotypes)
    frequencies, iterations = em_haplotype_frequencies(
        rows, tolerance=tolerance, max_iterations=max_iterations
    )
    return HaplotypeEstimate(frequencies, n_haplotypes, iterations=iterations)
