"""
intercache — Cache Keys

Key generators for argument-based keys and the evaluator for key expressions.
"""

from .expression import ExpressionEvaluator
from .generator import KeyGenerator, SimpleHashKeyGenerator, create_key_generator

__all__ = [
    "KeyGenerator",
    "SimpleHashKeyGenerator",
    "create_key_generator",
    "ExpressionEvaluator",
]
