"""
Visualisation des résultats LD : heat map triangulaire locus × locus.
"""

import os

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from .config import LOCUS_DELIMITER, RESULT_COLUMNS

MEASURES = RESULT_COLUMNS[1:5]


def ld_matrix(results, measure="D'"):
    """
    Matrice carrée des valeurs d'une mesure LD (NaN pour les paires non calculées).

    Returns
    -------
    loci : list of str
        Ordre de première apparition dans la table
    matrix : array (n, n)
        matrix[j, i] = valeur de la paire (i, j), i < j
    """
    if measure not in MEASURES:
        raise ValueError(f"Mesure inconnue: {measure} (choix: {', '.join(MEASURES)})")

    loci = []
    pairs = []
    for label, value in zip(results[RESULT_COLUMNS[0]], results[measure]):
        locus_a, locus_b = str(label).split(LOCUS_DELIMITER, 1)
        for locus in (locus_a, locus_b):
            if locus not in loci:
                loci.append(locus)
        try:
            pairs.append((locus_a, locus_b, float(value)))
        except (TypeError, ValueError):
            pairs.append((locus_a, locus_b, np.nan))

    matrix = np.full((len(loci), len(loci)), np.nan)
    for locus_a, locus_b, value in pairs:
        matrix[loci.index(locus_b), loci.index(locus_a)] = value
    return loci, matrix


def plot_ld_heatmap(results, output_path, measure="D'", title=None):
    """
    Heat map triangulaire d'une mesure LD pour toutes les paires de loci.

    Parameters
    ----------
    results : DataFrame
        Table produite par PairScanner.scan()
    output_path : str
        Fichier image (png, pdf, ...)
    measure : str
        "D'", 'Wn', 'W(Loc1|Loc2)' ou 'W(Loc2|Loc1)'
    """
    loci, matrix = ld_matrix(results, measure)
    n = len(loci)

    fig, ax = plt.subplots(figsize=(max(4, 0.8 * n + 2), max(3.5, 0.8 * n + 1.5)))
    masked = np.ma.masked_invalid(matrix)
    cmap = matplotlib.colormaps['Reds'].copy()
    cmap.set_bad(color='#f0f0f0')
    im = ax.imshow(masked, cmap=cmap, vmin=0.0, vmax=1.0)

    for row in range(n):
        for col in range(row):
            value = matrix[row, col]
            text = '—' if np.isnan(value) else f"{value:.2f}"
            ax.text(col, row, text, ha='center', va='center', fontsize=8,
                    color='white' if not np.isnan(value) and value > 0.6 else 'black')

    ax.set_xticks(range(n))
    ax.set_yticks(range(n))
    ax.set_xticklabels(loci, rotation=45, ha='right', fontsize=9)
    ax.set_yticklabels(loci, fontsize=9)
    ax.set_title(title or f"LD {measure}", fontsize=12, fontweight='bold')
    fig.colorbar(im, ax=ax, shrink=0.8, label=measure)

    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"  → {output_path}")
    return output_path
