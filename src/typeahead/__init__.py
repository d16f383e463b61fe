"""Typeahead — Autocomplete query engine with pluggable search backends."""

__version__ = "0.1.0"
