"""
SCRIPTORIUM - Property-Based Testing Suite

Property-based testing using Hypothesis to discover edge cases and invariants
in reference resolution and cross-reference clustering.
"""
