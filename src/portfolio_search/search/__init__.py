"""
Search index assembly and query engine package.

This package provides a pure-Python search stack:
- markup: plain-text extraction and route derivation
- normalizer: source records -> uniform documents, de-duplicated by identity
- store: the immutable index and its JSON artifact
- matchers / fuzzy: exact, substring and fuzzy match stages
- ranking: score fusion and final ordering
- snippet: highlighted excerpts
- pagination / render: presentation-ready output
"""
