"""Tests pour le calcul de D', Wn et des ALD conditionnels."""

import numpy as np
import pytest

from pould.config import RESULT_COLUMNS
from pould.ld_engine import (
    AlleleFrequencies, compute_ld, conditional_ald, disequilibrium,
    haplotype_matrix, wn_statistic,
)


def _freqs(locus, alleles, freqs):
    """AlleleFrequencies à partir de fréquences (comptages sur 100 observations)."""
    return AlleleFrequencies(locus, alleles, [f * 100 for f in freqs])


class TestAlleleFrequencies:
    def test_first_seen_order(self):
        af = AlleleFrequencies.from_strands('A', ['02', '01'], ['01', '01'])
        assert af.alleles == ['02', '01']
        assert list(af.counts) == [1, 3]
        assert af.freqs == pytest.approx([0.25, 0.75])
        assert af.homozygosity == pytest.approx(0.625)

    def test_as_table(self):
        af = AlleleFrequencies.from_strands('A', ['01', '02'], ['01', '01'])
        table = af.as_table()
        count, freq, squared = table['01']
        assert count == 3
        assert freq == pytest.approx(0.75)
        assert squared == pytest.approx(0.5625)
        assert table['02'][0] == 1

    def test_monomorphic(self):
        af = AlleleFrequencies.from_strands('A', ['01', '01'], ['01', '01'])
        assert af.is_monomorphic
        assert af.homozygosity == 1.0


class TestHaplotypeMatrix:
    def test_unobserved_are_zero(self):
        fa = _freqs('A', ['A1', 'A2'], [0.5, 0.5])
        fb = _freqs('B', ['B1', 'B2', 'B3'], [0.5, 0.25, 0.25])
        m = haplotype_matrix({('A2', 'B3'): 0.25, ('A1', 'B1'): 0.5, ('A2', 'B2'): 0.25}, fa, fb)
        np.testing.assert_allclose(m, [[0.5, 0.0, 0.0], [0.0, 0.25, 0.25]])


class TestFullyLinked:
    def setup_method(self):
        self.fa = _freqs('A', ['A1', 'A2'], [0.5, 0.5])
        self.fb = _freqs('B', ['B1', 'B2'], [0.5, 0.5])
        self.haps = {('A1', 'B1'): 0.5, ('A2', 'B2'): 0.5}

    def test_all_measures_are_one(self):
        res = compute_ld(self.haps, self.fa, self.fb, 24)
        assert res.d_prime == pytest.approx(1.0)
        assert res.wn == pytest.approx(1.0)
        assert res.ald_1_given_2 == pytest.approx(1.0)
        assert res.ald_2_given_1 == pytest.approx(1.0)
        assert res.n_haplotypes == 24

    def test_row_order(self):
        row = compute_ld(self.haps, self.fa, self.fb, 24).as_row()
        assert len(row) == 5
        assert row[4] == 24


class TestEquilibrium:
    def test_independent_loci(self):
        fa = _freqs('A', ['A1', 'A2'], [0.5, 0.5])
        fb = _freqs('B', ['B1', 'B2'], [0.5, 0.5])
        haps = {(a, b): 0.25 for a in fa.alleles for b in fb.alleles}
        res = compute_ld(haps, fa, fb, 24)
        assert res.d_prime == pytest.approx(0.0, abs=1e-12)
        assert res.wn == pytest.approx(0.0, abs=1e-12)
        assert res.ald_1_given_2 == pytest.approx(0.0, abs=1e-6)
        assert res.ald_2_given_1 == pytest.approx(0.0, abs=1e-6)

    def test_unbalanced_independent_loci(self):
        fa = _freqs('A', ['A1', 'A2', 'A3'], [0.2, 0.3, 0.5])
        fb = _freqs('B', ['B1', 'B2'], [0.6, 0.4])
        haps = {(a, b): pa * pb for a, pa in zip(fa.alleles, fa.freqs)
                for b, pb in zip(fb.alleles, fb.freqs)}
        res = compute_ld(haps, fa, fb, 100)
        assert res.d_prime == pytest.approx(0.0, abs=1e-12)
        assert res.wn == pytest.approx(0.0, abs=1e-12)


class TestAsymmetry:
    """A1 et A2 portent B1, A3 porte B2 : B est déterminé par A, pas l'inverse."""

    def setup_method(self):
        self.fa = _freqs('A', ['A1', 'A2', 'A3'], [0.25, 0.25, 0.5])
        self.fb = _freqs('B', ['B1', 'B2'], [0.5, 0.5])
        self.haps = {('A1', 'B1'): 0.25, ('A2', 'B1'): 0.25, ('A3', 'B2'): 0.5}

    def test_directional_values(self):
        res = compute_ld(self.haps, self.fa, self.fb, 40)
        # F(A|B) = 0.5*0.5 + 0.5*1 = 0.75 ; F_A = 0.375
        assert res.ald_1_given_2 == pytest.approx(np.sqrt(0.6))
        assert res.ald_2_given_1 == pytest.approx(1.0)
        assert res.d_prime == pytest.approx(1.0)
        assert res.wn == pytest.approx(1.0)

    def test_result_columns_direction(self):
        """W(Loc1|Loc2) conditionne sur le locus 2, W(Loc2|Loc1) sur le locus 1."""
        res = compute_ld(self.haps, self.fa, self.fb, 40)
        row = dict(zip(RESULT_COLUMNS[1:], res.as_row()))
        assert row['W(Loc1|Loc2)'] == pytest.approx(np.sqrt(0.6))
        assert row['W(Loc2|Loc1)'] == pytest.approx(1.0)

    def test_flip_toggle(self):
        m = haplotype_matrix(self.haps, self.fa, self.fb)
        assert conditional_ald(m, self.fa, self.fb, flip=False) == pytest.approx(1.0)
        assert conditional_ald(m, self.fa, self.fb, flip=True) == pytest.approx(np.sqrt(0.6))


class TestBounds:
    @pytest.mark.parametrize('seed', [0, 1, 2, 3])
    def test_measures_in_unit_interval(self, seed):
        rng = np.random.default_rng(seed)
        m = rng.dirichlet(np.ones(12)).reshape(3, 4)
        fa = AlleleFrequencies('A', ['a1', 'a2', 'a3'], m.sum(axis=1))
        fb = AlleleFrequencies('B', ['b1', 'b2', 'b3', 'b4'], m.sum(axis=0))
        haps = {(fa.alleles[i], fb.alleles[j]): m[i, j] for i in range(3) for j in range(4)}
        res = compute_ld(haps, fa, fb, 200)
        for value in (res.d_prime, res.wn, res.ald_1_given_2, res.ald_2_given_1):
            assert -1e-12 <= value <= 1.0 + 1e-12


class TestEdgeCases:
    def test_wn_undefined_for_monomorphic(self):
        with pytest.raises(ValueError):
            wn_statistic(0.0, 20, 1, 3)

    def test_wn_uses_smaller_locus(self):
        assert wn_statistic(40.0, 20, 3, 5) == pytest.approx(np.sqrt(40.0 / (20 * 2)))

    def test_ald_undefined_when_conditioned_locus_is_fixed(self):
        fa = _freqs('A', ['A1', 'A2'], [0.5, 0.5])
        fb = _freqs('B', ['B1'], [1.0])
        m = np.array([[0.5], [0.5]])
        with pytest.raises(ValueError, match='homozygotie'):
            conditional_ald(m, fa, fb, flip=False)

    def test_chi2_matches_counts(self):
        # Table 2x2 : h = [[0.4, 0.1], [0.1, 0.4]], p = q = 0.5, D = 0.15
        m = np.array([[0.4, 0.1], [0.1, 0.4]])
        d_prime, chi2 = disequilibrium(m, 100)
        assert d_prime == pytest.approx(0.6)
        assert chi2 == pytest.approx(100 * 4 * 0.15 ** 2 / 0.25)
