"""Tools for CNF formulas: parsing, simplification, options, Horn renaming, model refinement and resource-limited runs."""

__version__ = "0.1.0"