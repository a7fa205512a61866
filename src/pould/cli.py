#!/usr/bin/env python3
"""
pould — LD et ALD conditionnel pour données familiales HLA/KIR
==============================================================

Calcule D', Wn et les ALD conditionnels de Thomson & Single pour toutes
les paires de loci d'un fichier de GL Strings familial ou d'une table de
génotypes en colonnes.

Usage:
    pould famille.csv
    pould famille.csv --unphased --threshold 20 --output results
    pould genotypes.txt --unphased --trunc 2 --heatmap "D'"
"""

import argparse
import os
import sys
import time

from pould.config import DEFAULT_THRESHOLD, DEFAULT_FRAME_NAME
from pould.data_parser import ld_wrap
from pould.visualizations import MEASURES, plot_ld_heatmap


def build_parser():
    parser = argparse.ArgumentParser(
        description='pould — LD et ALD conditionnel pour données familiales',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemples:
  # Haplotypes phasés (colonnes 'Relation' et 'Gl String')
  pould data/famille.csv --output results

  # Génotypes non phasés (EM), allèles tronqués à 2 champs
  pould data/genotypes.txt --unphased --trunc 2

  # Heat map des valeurs Wn
  pould data/famille.csv --heatmap Wn
        """
    )
    parser.add_argument('input',
                        help='Fichier de données familiales (.csv, .txt ou .tsv)')
    parser.add_argument('--threshold', type=int, default=DEFAULT_THRESHOLD,
                        help=f'Nombre minimal de sujets complets par paire (défaut: {DEFAULT_THRESHOLD})')
    parser.add_argument('--unphased', action='store_true',
                        help='Données non phasées : estimation des haplotypes par EM')
    parser.add_argument('--trunc', type=int, default=0,
                        help='Troncature des allèles à N champs (0=aucune, défaut: 0)')
    parser.add_argument('--output', default='results',
                        help='Dossier de sortie (défaut: results)')
    parser.add_argument('--frame-name', default=DEFAULT_FRAME_NAME,
                        help=f'Nom du jeu de données (défaut: {DEFAULT_FRAME_NAME})')
    parser.add_argument('--no-vectors', action='store_true',
                        help="Ne pas écrire les vecteurs d'haplotypes")
    parser.add_argument('--heatmap', choices=MEASURES, default=None,
                        help='Générer une heat map de la mesure choisie')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    print("╔══════════════════════════════════════════════════════════╗")
    print("║      pould — Déséquilibre de Liaison (D', Wn, ALD)       ║")
    print("╚══════════════════════════════════════════════════════════╝")
    print()

    t_start = time.time()
    try:
        results = ld_wrap(
            args.input,
            threshold=args.threshold,
            phased=not args.unphased,
            frame_name=args.frame_name,
            trunc=args.trunc,
            write_to=args.output,
            save_vectors=not args.no_vectors,
        )
    except ValueError as exc:
        print(f"Erreur de configuration: {exc}", file=sys.stderr)
        return 2

    if results is None:
        print("Analyse interrompue.", file=sys.stderr)
        return 1

    if args.heatmap:
        print("\n  Génération de la heat map...")
        stem = os.path.splitext(os.path.basename(args.input))[0]
        safe = args.heatmap.replace("'", "prime").replace('|', '_').replace('(', '').replace(')', '')
        plot_ld_heatmap(results, os.path.join(args.output, f"{stem}_{safe}_heatmap.png"),
                        measure=args.heatmap)

    t_elapsed = time.time() - t_start
    print(f"\nTerminé en {t_elapsed:.1f} secondes ✓")
    return 0


if __name__ == '__main__':
    sys.exit(main())
