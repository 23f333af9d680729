"""
Keyword-based DSA concept tagging for provider-generated replies.
"""

from typing import Dict, List, Tuple


DSA_CONCEPT_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    # Data structures
    "array": ("arrays", "array-manipulation"),
    "linked list": ("linked-lists", "data-structures"),
    "stack": ("stacks", "data-structures"),
    "queue": ("queues", "data-structures"),
    "tree": ("trees", "binary-trees"),
    "binary tree": ("binary-trees", "trees"),
    "bst": ("binary-search-trees", "trees"),
    "binary search tree": ("binary-search-trees", "trees"),
    "heap": ("heaps", "trees"),
    "graph": ("graphs", "graph-algorithms"),
    "hash": ("hashing", "hash-tables"),
    "hash table": ("hash-tables", "hashing"),
    "hash map": ("hash-maps", "hashing"),

    # Algorithms
    "sort": ("sorting", "algorithms"),
    "search": ("searching", "algorithms"),
    "binary search": ("binary-search", "searching"),
    "dfs": ("depth-first-search", "graph-algorithms"),
    "bfs": ("breadth-first-search", "graph-algorithms"),
    "dynamic programming": ("dynamic-programming", "algorithms"),
    "recursion": ("recursion", "algorithms"),
    "backtracking": ("backtracking", "algorithms"),
    "greedy": ("greedy-algorithms", "algorithms"),
    "divide and conquer": ("divide-and-conquer", "algorithms"),

    # Complexity
    "time complexity": ("time-complexity", "analysis"),
    "space complexity": ("space-complexity", "analysis"),
    "big o": ("big-o-notation", "complexity-analysis"),
    "o(n)": ("time-complexity", "analysis"),
    "o(log n)": ("time-complexity", "analysis"),
    "o(n^2)": ("time-complexity", "analysis"),
}


def extract_dsa_concepts(user_message: str, response: str) -> List[str]:
    """
    Collect concept tags for every keyword found in the message or the reply.

    Tags are de-duplicated and keep the order in which they were first found.
    """
    combined_text = f"{user_message or ''} {response or ''}".lower()
    concepts: List[str] = []

    for keyword, tags in DSA_CONCEPT_KEYWORDS.items():
        if keyword in combined_text:
            for tag in tags:
                if tag not in concepts:
                    concepts.append(tag)

    return concepts
