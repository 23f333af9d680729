"""
Tests for keyword-based concept tagging.
"""

from dsa_tutor.services.concept_tagger import extract_dsa_concepts


class TestExtractDSAConcepts:

    def test_tags_from_user_message(self):
        tags = extract_dsa_concepts("How does a stack work?", "It is last in, first out.")
        assert tags == ["stacks", "data-structures"]

    def test_tags_from_response(self):
        tags = extract_dsa_concepts("Help me", "Use a hash table for O(1) lookups.")
        assert "hash-tables" in tags
        assert "hashing" in tags

    def test_tags_are_unique_and_ordered(self):
        tags = extract_dsa_concepts("binary search tree", "A BST is a binary tree.")
        assert len(tags) == len(set(tags))
        assert tags.index("trees") < tags.index("binary-search-trees")

    def test_case_insensitive(self):
        assert "dynamic-programming" in extract_dsa_concepts("DYNAMIC PROGRAMMING", "")

    def test_no_concepts(self):
        assert extract_dsa_concepts("Good morning", "Hello! How can I help?") == []

    def test_none_inputs(self):
        assert extract_dsa_concepts(None, None) == []
