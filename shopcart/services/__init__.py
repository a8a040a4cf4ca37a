"""Leaf services used by the cart engine."""
