"""Rewrite ButterKnife view bindings into findViewById or View Binding code."""

__version__ = "0.1.0"
