"""Unit tests for fuzzy matching / typo tolerance."""

import pytest

from mcp_connectors.search.fuzzy import candidate_terms, fuzzy_credit, get_max_edit_distance, levenshtein_distance


@pytest.mark.unit
class TestLevenshteinDistance:
    def test_identical_strings(self):
        assert levenshtein_distance("hello", "hello") == 0

    def test_empty_strings(self):
        assert levenshtein_distance("", "") == 0
        assert levenshtein_distance("abc", "") == 3
        assert levenshtein_distance("", "abc") == 3

    def test_single_edits(self):
        assert levenshtein_distance("cat", "cats") == 1
        assert levenshtein_distance("cats", "cat") == 1
        assert levenshtein_distance("cat", "bat") == 1

    def test_multiple_edits(self):
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_early_exit_caps_distance(self):
        assert levenshtein_distance("abcdef", "uvwxyz", max_distance=2) == 3
        assert levenshtein_distance("a", "abcdef", max_distance=1) == 2

    def test_common_typos(self):
        assert levenshtein_distance("password", "pasword") == 1
        assert levenshtein_distance("github", "gihtub") == 2


@pytest.mark.unit
class TestGetMaxEditDistance:
    def test_budgets_scale_with_length(self):
        assert [get_max_edit_distance(n) for n in (1, 2, 3, 5, 6, 20)] == [0, 0, 1, 1, 2, 2]


@pytest.mark.unit
class TestCandidateTerms:
    def test_nearest_first_then_alphabetical(self):
        assert candidate_terms("helo", ["world", "help", "hello", "hell"]) == [("hell", 1), ("hello", 1), ("help", 1)]

    def test_two_edit_candidates_follow_one_edit_candidates(self):
        assert candidate_terms("pasword", ["passwords", "password", "keyword"]) == [("password", 1), ("passwords", 2)]

    def test_respects_length_budget(self):
        assert candidate_terms("hezxo", ["hello", "world"]) == []

    def test_short_terms_never_fuzzy(self):
        assert candidate_terms("ab", ["ac", "abc"]) == []

    def test_exact_term_is_not_a_candidate(self):
        assert candidate_terms("test", ["test"]) == []

    def test_empty_vocabulary(self):
        assert candidate_terms("hello", []) == []


@pytest.mark.unit
def test_fuzzy_credit_decays_with_distance():
    assert fuzzy_credit(0) == 1.0
    assert fuzzy_credit(1) == pytest.approx(0.8)
    assert fuzzy_credit(2) == pytest.approx(0.6)
    assert fuzzy_credit(10) == 0.0
