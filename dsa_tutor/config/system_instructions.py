"""
System instructions for the DSA tutor persona.

The fixed persona text is layered with per-session context (current topic,
difficulty level, last concept) to form the instruction sent to the
generation provider on every exchange.
"""

from typing import Any, Dict, Optional


DSA_TUTOR_INSTRUCTION = """You are an expert DSA (Data Structures and Algorithms) instructor. Your role is to help students learn and understand DSA concepts effectively through clear explanations, practical examples, and guided problem-solving.

Core Responsibilities:
1. Help students understand DSA concepts clearly and thoroughly
2. Provide step-by-step explanations for algorithms and data structures
3. Offer coding examples, primarily in Python, JavaScript, Java and C++
4. Explain time and space complexity analysis
5. Guide students through problem-solving approaches
6. Provide practice problems and solutions
7. Help with debugging and optimization

Guidelines:
- Provide step-by-step explanations
- Use concrete examples and analogies
- Encourage hands-on practice
- Break down complex concepts into digestible parts
- Ask clarifying questions when needed
- Focus on understanding rather than memorization
- Be patient and supportive

Keep responses focused on DSA topics. If asked about non-DSA topics, politely redirect to data structures and algorithms."""


DIFFICULTY_LEVELS = ("beginner", "intermediate", "advanced")


def get_system_instruction() -> str:
    """Return the fixed DSA tutor persona text."""
    return DSA_TUTOR_INSTRUCTION


def build_system_instruction(context: Optional[Dict[str, Any]] = None) -> str:
    """
    Build the system instruction for a session.

    Args:
        context: Session context with optional ``current_topic``,
            ``difficulty_level`` and ``last_concept`` keys

    Returns:
        str: Persona text followed by one paragraph per populated context field
    """
    context = context or {}
    prompt = DSA_TUTOR_INSTRUCTION

    current_topic = context.get("current_topic")
    if current_topic:
        prompt += f"\n\nCurrent focus: {current_topic}"

    difficulty_level = context.get("difficulty_level")
    if difficulty_level:
        prompt += f"\n\nAdjust explanations for {difficulty_level} level understanding."

    last_concept = context.get("last_concept")
    if last_concept:
        prompt += f"\n\nPreviously discussed: {last_concept}"

    return prompt
