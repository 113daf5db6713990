"""
Quiz module - Question generation and grading.

This module is responsible for:
1. Turning document chunks into quiz questions via the language model
2. Parsing the model's free-text output
3. Grading student answers
"""

from .agent import QuizAgent, grade_closed_form
from .parser import QuestionParseError, parse_grade, parse_question

__all__ = [
    "QuestionParseError",
    "QuizAgent",
    "grade_closed_form",
    "parse_grade",
    "parse_question",
]
