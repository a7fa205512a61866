"""Tests pour la décomposition et la troncature des noms d'allèles."""

import pytest

from pould.allele_parser import ParsedAllele, parse_allele, split_haplotype, truncate_allele


class TestParseAllele:
    def test_prefixed_allele(self):
        assert parse_allele('HLA-DRB1*15:01:01') == ParsedAllele('HLA-', 'DRB1', '15:01:01')

    def test_unprefixed_allele(self):
        assert parse_allele('KIR2DL1*001') == ParsedAllele('', 'KIR2DL1', '001')

    def test_truncation(self):
        allele = parse_allele('HLA-A*01:01:01:02N', trunc=2)
        assert allele.variant == '01:01'
        assert allele.locus == 'A'

    def test_truncation_beyond_fields_is_noop(self):
        assert parse_allele('HLA-A*01', trunc=3).variant == '01'

    def test_unusual_names_are_plain_values(self):
        """Pas de validation : NULL / NoMatch sont des allèles comme les autres."""
        assert parse_allele('HLA-A*NULL').variant == 'NULL'
        assert parse_allele('HLA-DRB1*NoMatch', trunc=1).variant == 'NoMatch'

    def test_missing_marker_has_no_locus(self):
        allele = parse_allele('garbage')
        assert allele.locus == ''
        assert allele.variant == 'garbage'

    def test_whitespace_stripped(self):
        assert parse_allele(' HLA-B*08:01 ') == ParsedAllele('HLA-', 'B', '08:01')


class TestTruncateAllele:
    def test_no_truncation(self):
        assert truncate_allele('01:01:01', 0) == '01:01:01'

    @pytest.mark.parametrize('label', ['01:01:01:02N', '15:01', '07', 'NULL'])
    def test_idempotence(self, label):
        once = truncate_allele(label, 2)
        assert truncate_allele(once, 2) == once
        assert truncate_allele(once, 3) == once


class TestSplitHaplotype:
    def test_split_and_skip_empty(self):
        alleles = split_haplotype('HLA-A*01:01~HLA-B*08:01~')
        assert [a.locus for a in alleles] == ['A', 'B']
        assert [a.variant for a in alleles] == ['01:01', '08:01']

    def test_empty_strand(self):
        assert split_haplotype('') == []
