"""
Card Creatr - layered card configuration and print layout

Card Creatr resolves layered card configuration (overrides, config files,
fallbacks and built-in defaults), renders each card of a deck from a
template, and lays the rendered cards out on printable sheets.
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
