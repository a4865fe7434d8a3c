"""
Language code mappings and utilities.

Standards:
- ISO 639-1: 2-letter language codes (en, fr, de)
- BCP 47: Language + Region codes (en-US, fr-FR, pt-BR)

Pages are translated between base languages. Culture names coming from
cookies or Accept-Language headers (e.g. 'fr-FR') are reduced to their base
language before the supported-language check. Remote providers that want
their own spelling (DeepL uses upper case and regional English/Portuguese
targets) get it from to_deepl_code().
"""

from typing import Optional, Dict

# Languages a page can be translated from or into
# Source: https://en.wikipedia.org/wiki/List_of_ISO_639-1_codes
LANGUAGE_NAMES = {
    'ar': 'Arabic',
    'bg': 'Bulgarian',
    'cs': 'Czech',
    'da': 'Danish',
    'de': 'German',
    'el': 'Greek',
    'en': 'English',
    'es': 'Spanish',
    'et': 'Estonian',
    'fi': 'Finnish',
    'fr': 'French',
    'hu': 'Hungarian',
    'id': 'Indonesian',
    'it': 'Italian',
    'ja': 'Japanese',
    'ko': 'Korean',
    'lt': 'Lithuanian',
    'lv': 'Latvian',
    'nb': 'Norwegian Bokmål',
    'nl': 'Dutch',
    'pl': 'Polish',
    'pt': 'Portuguese',
    'ro': 'Romanian',
    'ru': 'Russian',
    'sk': 'Slovak',
    'sl': 'Slovenian',
    'sv': 'Swedish',
    'tr': 'Turkish',
    'uk': 'Ukrainian',
    'zh': 'Chinese',
}

# DeepL rejects bare 'EN' and 'PT' as target languages
DEEPL_TARGET_VARIANTS: Dict[str, str] = {
    'en': 'EN-US',
    'pt': 'PT-PT',
}


def is_valid_language_code(code: str) -> bool:
    """
    Check if a base language code is known.

    Examples:
        >>> is_valid_language_code('fr')
        True
        >>> is_valid_language_code('fr-FR')
        False
    """
    return code in LANGUAGE_NAMES


def get_language_name(code: str) -> Optional[str]:
    """
    Get the full language name from code.

    Examples:
        >>> get_language_name('fr')
        'French'
        >>> get_language_name('xx') is None
        True
    """
    return LANGUAGE_NAMES.get(code)


def extract_base_language(code: str) -> str:
    """
    Extract base language from a culture name.

    Examples:
        >>> extract_base_language('fr-FR')
        'fr'
        >>> extract_base_language('en_US')
        'en'
        >>> extract_base_language('FR')
        'fr'
    """
    return code.replace('_', '-').split('-')[0].lower()


def normalize_language_code(code: Optional[str], default: Optional[str] = None) -> Optional[str]:
    """
    Reduce a culture name or language code to a known base language.

    Returns default when the code is empty or not a known language.
    """
    if not code or not code.strip():
        return default
    base = extract_base_language(code.strip())
    return base if is_valid_language_code(base) else default


def languages_match(code1: str, code2: str) -> bool:
    """
    Check if two language codes name the same base language.

    Examples:
        >>> languages_match('en', 'en-US')
        True
        >>> languages_match('fr-FR', 'fr-CA')
        True
        >>> languages_match('en', 'fr')
        False
    """
    return extract_base_language(code1) == extract_base_language(code2)


def to_deepl_code(code: str, target: bool = False) -> str:
    """
    Spell a base language code the way DeepL expects it.

    Examples:
        >>> to_deepl_code('fr')
        'FR'
        >>> to_deepl_code('en', target=True)
        'EN-US'
        >>> to_deepl_code('en')
        'EN'
    """
    base = extract_base_language(code)
    if target and base in DEEPL_TARGET_VARIANTS:
        return DEEPL_TARGET_VARIANTS[base]
    return base.upper()
