"""Recover the implicit supertag/field schema of Tana graph exports."""

__version__ = "0.1.0"
