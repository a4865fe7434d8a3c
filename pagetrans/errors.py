"""
Page Translation Exceptions

This module contains the exception hierarchy shared by the extractor, the
remote client and the page pipeline. Kept separate to avoid circular imports
between the translation and remote packages.
"""


class TranslationError(Exception):
    """Translation error with optional code and details."""

    code = "translation_error"

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        if code:
            self.code = code
        self.details = details or {}


class ElementNotFound(TranslationError):
    """A selector matched no element in the rendered page."""

    code = "element_not_found"

    def __init__(self, selector: str, details: dict = None):
        super().__init__(
            f"No element matched selector '{selector}'",
            details={"selector": selector, **(details or {})},
        )
        self.selector = selector


class RemoteUnavailable(TranslationError):
    """Transport failure, timeout or unusable response from the remote service."""

    code = "remote_unavailable"


class RemoteRejected(TranslationError):
    """The remote service refused the request (authentication or quota)."""

    code = "remote_rejected"


class LanguageUnsupported(TranslationError):
    """The requested source/target language pair is not served."""

    code = "language_unsupported"

    def __init__(self, source_language: str, target_language: str, message: str = None):
        super().__init__(
            message or f"Unsupported language pair: {source_language} -> {target_language}",
            details={"source_language": source_language, "target_language": target_language},
        )
        self.source_language = source_language
        self.target_language = target_language


class ViewNotFound(TranslationError):
    """The render collaborator has no view with the requested name."""

    code = "view_not_found"

    def __init__(self, view_name: str):
        super().__init__(f"View {view_name} not found", details={"view": view_name})
        self.view_name = view_name


class SubstitutionError(TranslationError):
    """A translated fragment could not be written back into the rendered page."""

    code = "substitution_failed"

    def __init__(self, selector: str, message: str = None):
        super().__init__(
            message or f"Fragment for selector '{selector}' not found in rendered page",
            details={"selector": selector},
        )
        self.selector = selector
