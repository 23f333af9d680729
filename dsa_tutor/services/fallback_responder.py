"""
Rule-based fallback responder for when the generation provider is unavailable.

Rules are evaluated top to bottom against the lower-cased user message and the
first match wins. Predicates overlap ("what is the time complexity of a bst?"
matches both the BST and the complexity rules), so the order of ``FALLBACK_RULES``
is part of the observable behavior.
"""

import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from dsa_tutor.services import fallback_templates as templates
from dsa_tutor.services.generation_provider import GenerationResult


FALLBACK_MODEL = "fallback-dsa-instructor"
GENERIC_FALLBACK_MODEL = "fallback"

GENERAL_DSA_KEYWORDS = (
    "algorithm", "data structure", "complexity", "sort", "search", "tree",
    "graph", "array", "list", "stack", "queue", "hash", "heap",
)

COMPLEXITY_HISTORY_KEYWORDS = ("complexity", "time", "space")

# Number of trailing history messages that count as "the previous turn"
FOLLOWUP_LOOKBACK = 2

History = Sequence[Dict[str, str]]
Predicate = Callable[[str, History], bool]


@dataclass(frozen=True)
class FallbackRule:
    """One row of the fallback table."""
    name: str
    predicate: Predicate
    template: str
    concept_tags: Tuple[str, ...]
    tokens_used: int

    def matches(self, lowered_message: str, history: History) -> bool:
        return self.predicate(lowered_message, history)


def _contains_any(*keywords: str) -> Predicate:
    def predicate(message: str, history: History) -> bool:
        return any(keyword in message for keyword in keywords)
    return predicate


def _contains_all(*keywords: str) -> Predicate:
    def predicate(message: str, history: History) -> bool:
        return all(keyword in message for keyword in keywords)
    return predicate


def previous_turn_mentions_complexity(history: History) -> bool:
    """True if the last turn of ``history`` talked about time/space complexity."""
    for message in list(history)[-FOLLOWUP_LOOKBACK:]:
        content = (message.get("content") or "").lower()
        if any(keyword in content for keyword in COMPLEXITY_HISTORY_KEYWORDS):
            return True
    return False


def _followup(keyword: str) -> Predicate:
    def predicate(message: str, history: History) -> bool:
        return keyword in message and previous_turn_mentions_complexity(history)
    return predicate


def _general_dsa(message: str, history: History) -> bool:
    return (
        any(keyword in message for keyword in GENERAL_DSA_KEYWORDS)
        or "detail" in message
        or "explain" in message
    )


FALLBACK_RULES: Tuple[FallbackRule, ...] = (
    FallbackRule(
        name="binary_search_tree",
        predicate=_contains_any("binary search tree", "bst"),
        template=templates.BINARY_SEARCH_TREE,
        concept_tags=("binary-search-trees", "trees", "data-structures"),
        tokens_used=150,
    ),
    FallbackRule(
        name="time_complexity",
        predicate=_contains_any("time complexity", "complexity"),
        template=templates.TIME_COMPLEXITY,
        concept_tags=("time-complexity", "algorithm-analysis", "big-o"),
        tokens_used=180,
    ),
    FallbackRule(
        name="merge_sort",
        predicate=_contains_any("merge sort", "mergesort"),
        template=templates.MERGE_SORT,
        concept_tags=("merge-sort", "sorting", "divide-conquer", "algorithms"),
        tokens_used=200,
    ),
    FallbackRule(
        name="arrays_vs_linked_lists",
        predicate=_contains_all("array", "linked list"),
        template=templates.ARRAYS_VS_LINKED_LISTS,
        concept_tags=("arrays", "linked-lists", "data-structures", "comparison"),
        tokens_used=250,
    ),
    FallbackRule(
        name="sieve_of_eratosthenes",
        predicate=_contains_any("sieve", "eratosthenes"),
        template=templates.SIEVE_OF_ERATOSTHENES,
        concept_tags=("sieve-of-eratosthenes", "prime-numbers", "algorithms", "number-theory"),
        tokens_used=200,
    ),
    FallbackRule(
        name="dynamic_programming",
        predicate=_contains_any("dynamic programming", "dp"),
        template=templates.DYNAMIC_PROGRAMMING,
        concept_tags=("dynamic-programming", "optimization", "memoization", "algorithms"),
        tokens_used=250,
    ),
    FallbackRule(
        name="complexity_detail_followup",
        predicate=_followup("detail"),
        template=templates.COMPLEXITY_DETAIL_FOLLOWUP,
        concept_tags=("time-complexity", "space-complexity", "big-o"),
        tokens_used=160,
    ),
    FallbackRule(
        name="complexity_examples_followup",
        predicate=_followup("example"),
        template=templates.COMPLEXITY_EXAMPLES_FOLLOWUP,
        concept_tags=("time-complexity", "big-o", "examples"),
        tokens_used=170,
    ),
    FallbackRule(
        name="general_dsa",
        predicate=_general_dsa,
        template=templates.GENERAL_DSA,
        concept_tags=("general-dsa", "learning-guide"),
        tokens_used=120,
    ),
)


class FallbackResponder:
    """
    Deterministic local responder used in place of the generation provider.

    ``respond`` never raises: unmatched input gets one of the generic redirect
    replies flagged with ``is_error``.
    """

    def __init__(
        self,
        rules: Sequence[FallbackRule] = FALLBACK_RULES,
        rng: Optional[random.Random] = None
    ):
        self.rules = tuple(rules)
        self.rng = rng or random.Random()

    def match(self, user_content: str, history: Optional[History] = None) -> Optional[FallbackRule]:
        """Return the first rule matching the message, or None for the catch-all."""
        lowered = (user_content or "").lower()
        history = history or []
        for rule in self.rules:
            if rule.matches(lowered, history):
                return rule
        return None

    def respond(self, user_content: str, history: Optional[History] = None) -> GenerationResult:
        rule = self.match(user_content, history)

        if rule is not None:
            return GenerationResult(
                content=rule.template,
                tokens_used=rule.tokens_used,
                model=FALLBACK_MODEL,
                is_dsa_concept=True,
                concept_tags=list(rule.concept_tags),
                is_fallback=True,
            )

        return GenerationResult(
            content=self.rng.choice(templates.GENERIC_REDIRECTS),
            tokens_used=0,
            model=GENERIC_FALLBACK_MODEL,
            is_dsa_concept=False,
            concept_tags=[],
            is_fallback=True,
            is_error=True,
        )


def rule_names(rules: Sequence[FallbackRule] = FALLBACK_RULES) -> List[str]:
    """Names of the rules in evaluation order."""
    return [rule.name for rule in rules]
