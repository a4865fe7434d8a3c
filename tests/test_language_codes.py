import pytest

from pagetrans import language_codes as lc


class TestNormalizeLanguageCode:

    @pytest.mark.parametrize("raw, expected", [
        ("fr", "fr"),
        ("fr-FR", "fr"),
        ("FR_fr", "fr"),
        (" en-US ", "en"),
    ])
    def test_known(self, raw, expected):
        assert lc.normalize_language_code(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "xx", "klingon"])
    def test_unknown_returns_default(self, raw):
        assert lc.normalize_language_code(raw) is None
        assert lc.normalize_language_code(raw, default="en") == "en"


class TestDeepLCodes:

    def test_source_codes_are_upper_case(self):
        assert lc.to_deepl_code("fr") == "FR"
        assert lc.to_deepl_code("en") == "EN"

    def test_regional_targets(self):
        assert lc.to_deepl_code("en", target=True) == "EN-US"
        assert lc.to_deepl_code("pt", target=True) == "PT-PT"
        assert lc.to_deepl_code("fr-FR", target=True) == "FR"


def test_languages_match():
    assert lc.languages_match("en", "en-US")
    assert not lc.languages_match("en", "fr")
