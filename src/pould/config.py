"""
Configuration de l'analyse LD / ALD : délimiteurs, sentinelles et paramètres.
"""

import tempfile

# ============================================================
# Format GL String
#   <haplotype1>+<haplotype2>
#   haplotype = [PREFIX-]LOCUS*VARIANT~[PREFIX-]LOCUS*VARIANT~...
# ============================================================

STRAND_DELIMITER = '+'
LOCUS_DELIMITER = '~'
ALLELE_MARKER = '*'
PREFIX_DELIMITER = '-'
FIELD_DELIMITER = ':'

# Suffixe de la colonne du second haplotype (brin 2) d'un locus
STRAND2_SUFFIX = '_1'

# Préfixe de locus incohérent entre les allèles du jeu de données
PREFIX_NOT_FOUND = None

# Valeurs manquantes dans les tables de génotypes
MISSING_VALUES = ('', '****')

# Colonnes attendues dans les données familiales
RELATION_COLUMN = 'Relation'
GL_STRING_COLUMNS = ('Gl String', 'Gl.String')
CHILD_RELATION = 'child'

# ============================================================
# Tables de sortie
# ============================================================

NOT_CALCULATED = 'Not Calculated'
NO_VALUE = '.'

RESULT_COLUMNS = [
    'Loc1~Loc2', "D'", 'Wn', 'W(Loc1|Loc2)', 'W(Loc2|Loc1)', 'N_Haplotypes',
]

VECTOR_COLUMNS = ['Dataset', 'Phase', 'Frequency', 'Count']

# ============================================================
# Estimation EM (données non phasées)
# ============================================================

# Somme des variations absolues des fréquences entre deux itérations
EM_TOLERANCE = 1e-7
# L'EM ralentit près des fréquences nulles (allèles multiples)
EM_MAX_ITERATIONS = 10000
# Haplotypes retirés de la table finale
EM_PRUNE_FREQUENCY = 1e-8

DEFAULT_THRESHOLD = 10
DEFAULT_FRAME_NAME = 'hla-family-data'


class AnalysisConfig:
    """Paramètres d'une analyse LDWrap."""

    def __init__(self, threshold=DEFAULT_THRESHOLD, phased=True, trunc=0,
                 frame_name=DEFAULT_FRAME_NAME, write_to=None,
                 save_vectors=True, em_tolerance=EM_TOLERANCE,
                 em_max_iterations=EM_MAX_ITERATIONS):
        """
        Parameters
        ----------
        threshold : int
            Nombre minimal de sujets complets pour analyser une paire de loci.
            Les valeurs < 1 sont ramenées à 1.
        phased : bool
            True si les deux haplotypes de chaque sujet sont connus.
        trunc : int
            Nombre de champs (séparés par ':') conservés dans les noms
            d'allèles. 0 = pas de troncature.
        frame_name : str
            Nom du jeu de données quand l'entrée est un DataFrame.
        write_to : str
            Dossier de sortie (défaut : dossier temporaire du système)
        save_vectors : bool
            Écrire un fichier de vecteur d'haplotypes par paire analysée
        em_tolerance, em_max_iterations :
            Critères d'arrêt de l'algorithme EM
        """
        if isinstance(threshold, bool) or int(threshold) != threshold:
            raise ValueError(f"Seuil de sujets invalide: {threshold!r}")
        if int(trunc) != trunc or trunc < 0:
            raise ValueError(f"Niveau de troncature invalide: {trunc!r}")
        if em_tolerance <= 0 or em_max_iterations < 1:
            raise ValueError("Paramètres EM invalides")

        self.threshold = max(int(threshold), 1)
        self.phased = bool(phased)
        self.trunc = int(trunc)
        self.frame_name = frame_name
        self.write_to = write_to if write_to is not None else tempfile.gettempdir()
        self.save_vectors = save_vectors
        self.em_tolerance = em_tolerance
        self.em_max_iterations = int(em_max_iterations)

    @property
    def phase_label(self):
        return 'Phased' if self.phased else 'Unphased'

    def __repr__(self):
        return (f"AnalysisConfig(threshold={self.threshold}, phased={self.phased}, "
                f"trunc={self.trunc}, write_to={self.write_to!r})")
