"""
Unit tests for the rule-based fallback responder.

Covers every rule of the fallback table, the first-match ordering between
overlapping rules, history-based follow-ups and the catch-all reply.
"""

import random

import pytest

from dsa_tutor.services import fallback_templates as templates
from dsa_tutor.services.fallback_responder import (
    FallbackResponder,
    FallbackRule,
    FALLBACK_MODEL,
    GENERIC_FALLBACK_MODEL,
    previous_turn_mentions_complexity,
    rule_names
)


COMPLEXITY_HISTORY = [
    {"role": "user", "content": "What is time complexity?"},
    {"role": "assistant", "content": templates.TIME_COMPLEXITY},
]


@pytest.fixture
def responder():
    return FallbackResponder(rng=random.Random(42))


class TestRuleTable:
    """Test the rule table itself."""

    def test_rule_order(self):
        assert rule_names() == [
            "binary_search_tree",
            "time_complexity",
            "merge_sort",
            "arrays_vs_linked_lists",
            "sieve_of_eratosthenes",
            "dynamic_programming",
            "complexity_detail_followup",
            "complexity_examples_followup",
            "general_dsa",
        ]

    def test_custom_rules_are_used(self):
        rule = FallbackRule(
            name="heaps",
            predicate=lambda message, history: "heap" in message,
            template="Heaps!",
            concept_tags=("heaps",),
            tokens_used=10,
        )
        result = FallbackResponder(rules=[rule]).respond("Tell me about heaps")

        assert result.content == "Heaps!"
        assert result.concept_tags == ["heaps"]
        assert result.tokens_used == 10


class TestTopicRules:
    """Test each topic rule in isolation."""

    @pytest.mark.parametrize("message, template, tags, tokens", [
        ("Explain binary search trees", templates.BINARY_SEARCH_TREE,
         ["binary-search-trees", "trees", "data-structures"], 150),
        ("How does a BST insert work?", templates.BINARY_SEARCH_TREE,
         ["binary-search-trees", "trees", "data-structures"], 150),
        ("What is time complexity?", templates.TIME_COMPLEXITY,
         ["time-complexity", "algorithm-analysis", "big-o"], 180),
        ("I struggle with complexity", templates.TIME_COMPLEXITY,
         ["time-complexity", "algorithm-analysis", "big-o"], 180),
        ("Walk me through merge sort", templates.MERGE_SORT,
         ["merge-sort", "sorting", "divide-conquer", "algorithms"], 200),
        ("mergesort please", templates.MERGE_SORT,
         ["merge-sort", "sorting", "divide-conquer", "algorithms"], 200),
        ("Array or linked list, which is better?", templates.ARRAYS_VS_LINKED_LISTS,
         ["arrays", "linked-lists", "data-structures", "comparison"], 250),
        ("How does the sieve find primes?", templates.SIEVE_OF_ERATOSTHENES,
         ["sieve-of-eratosthenes", "prime-numbers", "algorithms", "number-theory"], 200),
        ("Who was Eratosthenes?", templates.SIEVE_OF_ERATOSTHENES,
         ["sieve-of-eratosthenes", "prime-numbers", "algorithms", "number-theory"], 200),
        ("Teach me dynamic programming", templates.DYNAMIC_PROGRAMMING,
         ["dynamic-programming", "optimization", "memoization", "algorithms"], 250),
        ("what is dp", templates.DYNAMIC_PROGRAMMING,
         ["dynamic-programming", "optimization", "memoization", "algorithms"], 250),
        ("How do graphs work?", templates.GENERAL_DSA,
         ["general-dsa", "learning-guide"], 120),
        ("Please explain recursion", templates.GENERAL_DSA,
         ["general-dsa", "learning-guide"], 120),
    ])
    def test_topic_reply(self, responder, message, template, tags, tokens):
        result = responder.respond(message, [])

        assert result.content == template
        assert result.concept_tags == tags
        assert result.tokens_used == tokens
        assert result.is_dsa_concept is True
        assert result.model == FALLBACK_MODEL
        assert result.is_fallback is True
        assert result.is_error is False

    def test_matching_ignores_case(self, responder):
        assert responder.match("MERGE SORT").name == "merge_sort"


class TestRuleOrdering:
    """Test first-match-wins between overlapping predicates."""

    def test_bst_beats_time_complexity(self, responder):
        result = responder.respond("what is the time complexity of a bst?", [])

        assert result.content == templates.BINARY_SEARCH_TREE
        assert result.concept_tags == ["binary-search-trees", "trees", "data-structures"]

    def test_time_complexity_beats_merge_sort(self, responder):
        assert responder.match("time complexity of merge sort").name == "time_complexity"

    def test_arrays_need_both_keywords(self, responder):
        assert responder.match("How do arrays work?").name == "general_dsa"
        assert responder.match("Tell me about a linked list").name == "general_dsa"


class TestFollowUps:
    """Test follow-up detection based on the previous turn."""

    def test_detail_after_complexity_turn(self, responder):
        result = responder.respond("Can you go into more detail?", COMPLEXITY_HISTORY)

        assert result.content == templates.COMPLEXITY_DETAIL_FOLLOWUP
        assert result.concept_tags == ["time-complexity", "space-complexity", "big-o"]
        assert result.tokens_used == 160

    def test_examples_after_complexity_turn(self, responder):
        result = responder.respond("Show me an example", COMPLEXITY_HISTORY)

        assert result.content == templates.COMPLEXITY_EXAMPLES_FOLLOWUP
        assert result.concept_tags == ["time-complexity", "big-o", "examples"]
        assert result.tokens_used == 170

    def test_detail_without_history_is_general(self, responder):
        assert responder.match("Can you go into more detail?", []).name == "general_dsa"

    def test_example_without_history_is_catch_all(self, responder):
        assert responder.match("Show me an example", []) is None

    def test_only_last_turn_counts(self):
        history = COMPLEXITY_HISTORY + [
            {"role": "user", "content": "Thanks!"},
            {"role": "assistant", "content": "You're welcome."},
        ]
        assert previous_turn_mentions_complexity(history) is False
        assert previous_turn_mentions_complexity(COMPLEXITY_HISTORY) is True


class TestCatchAll:
    """Test the generic redirect reply."""

    def test_unmatched_message(self, responder):
        result = responder.respond("What's the weather like today?", [])

        assert result.content in templates.GENERIC_REDIRECTS
        assert result.tokens_used == 0
        assert result.is_dsa_concept is False
        assert result.concept_tags == []
        assert result.model == GENERIC_FALLBACK_MODEL
        assert result.is_error is True

    def test_random_source_is_injectable(self):
        expected = random.Random(7).choice(templates.GENERIC_REDIRECTS)
        result = FallbackResponder(rng=random.Random(7)).respond("hello there")

        assert result.content == expected

    def test_history_defaults_to_empty(self, responder):
        assert responder.respond("hello there").is_error is True
