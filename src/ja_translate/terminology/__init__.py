"""
Terminology management for ja-translate.

Provides:
- Glossary loading from YAML (categorized terms, keep-as-is list, context patterns)
- The merged, longest-first substitution table used by the translator
"""

from ja_translate.terminology.glossary import Glossary, load_glossary, parse_glossary

__all__ = ["Glossary", "load_glossary", "parse_glossary"]
