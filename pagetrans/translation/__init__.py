"""
Translation module - page translate-and-substitute pipeline

This module provides:
- extract_fragments: Fragment extraction by ordered selectors
- TranslationCache: Time-bounded cache of translated fragment lists
- substitute: Positional substitution with literal fallback
- translate_page / PageTranslator: The request pipeline
"""

from pagetrans.translation.extractor import Fragment, extract_fragments, fragment_texts
from pagetrans.translation.cache import TranslationCache, compute_cache_key
from pagetrans.translation.substitution import substitute
from pagetrans.translation.pipeline import (
    PageTranslator,
    SingleFlight,
    translate_page,
)
