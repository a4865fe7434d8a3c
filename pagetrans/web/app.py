"""Flask application configuration and route registration."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, Optional

from flask import Flask, Response, current_app, g, jsonify, redirect, render_template, request
from jinja2 import TemplateNotFound

from pagetrans import language_codes as lc
from pagetrans.config import load_config
from pagetrans.errors import (
    ElementNotFound,
    LanguageUnsupported,
    RemoteRejected,
    RemoteUnavailable,
    SubstitutionError,
    TranslationError,
    ViewNotFound,
)
from pagetrans.logger import get_logger
from pagetrans.remote.client import TranslationClient
from pagetrans.translation.cache import TranslationCache
from pagetrans.translation.pipeline import PageTranslator

logger = get_logger(__name__)

CULTURE_COOKIE = "culture"
CULTURE_COOKIE_MAX_AGE = 365 * 24 * 60 * 60  # one year
VIEW_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")

VIEW_TITLES = {
    "index": "Home Page",
    "privacy": "Privacy Policy",
}

ERROR_STATUS = {
    LanguageUnsupported: 400,
    ViewNotFound: 404,
    ElementNotFound: 500,
    SubstitutionError: 500,
    RemoteRejected: 502,
    RemoteUnavailable: 503,
}


def get_translator() -> PageTranslator:
    return current_app.extensions["pagetrans"]


def get_current_language() -> str:
    """
    Determine the requested language.
    Priority: query param > culture cookie > Accept-Language header > source language
    """
    translator = get_translator()

    # 1. Query parameter, passed through as is so unsupported codes get rejected
    lang = request.args.get('lang')
    if lang:
        return lang

    # 2. Cookie set by /set-language
    lang = request.cookies.get(CULTURE_COOKIE)
    if lang:
        return lang

    # 3. Accept-Language header, limited to what we serve
    servable = [translator.source_language] + translator.supported_languages
    accept_lang = request.accept_languages.best_match(servable)
    if accept_lang:
        return accept_lang

    return translator.source_language


def render_view(view_name: str, **context: Any) -> str:
    """Render a view to markup. Unknown views raise ViewNotFound."""
    if not VIEW_NAME_PATTERN.match(view_name):
        raise ViewNotFound(view_name)

    translator = get_translator()
    cultures = [
        {"code": code, "lang": code, "name": lc.get_language_name(code) or code}
        for code in [translator.source_language] + translator.supported_languages
    ]
    context.setdefault("title", VIEW_TITLES.get(view_name, view_name.replace("-", " ").title()))
    try:
        return render_template(
            f"{view_name}.html",
            current_year=datetime.now().year,
            current_lang=lc.normalize_language_code(getattr(g, 'lang', None), translator.source_language),
            cultures=cultures,
            **context,
        )
    except TemplateNotFound as e:
        raise ViewNotFound(view_name) from e


def is_local_url(url: Optional[str]) -> bool:
    """True for same-site paths like '/privacy'; rejects '//host' and absolute URLs."""
    if not url or not url.startswith('/'):
        return False
    return not url.startswith('//') and not url.startswith('/\\')


def build_app(
    config: Optional[Dict[str, Any]] = None,
    client: Optional[TranslationClient] = None,
    cache: Optional[TranslationCache] = None,
) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__, template_folder="templates")
    config = config if config is not None else load_config()

    app.extensions["pagetrans"] = PageTranslator(
        renderer=render_view,
        config=config,
        cache=cache,
        client=client,
    )

    @app.before_request
    def before_request():
        """Set the requested language in g before each request."""
        g.lang = get_current_language()

    register_routes(app)
    register_error_handlers(app)

    return app


def _html(markup: str) -> Response:
    return Response(markup, mimetype="text/html")


def register_routes(app: Flask) -> None:
    """Register page, language and health routes."""

    @app.get("/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok"})

    @app.get("/")
    def index():
        return _html(get_translator().translate_view("index", g.lang))

    @app.get("/pages/<view_name>")
    def page(view_name: str):
        return _html(get_translator().translate_view(view_name, g.lang))

    @app.get("/privacy")
    def privacy():
        return _html(render_view("privacy"))

    @app.post("/set-language")
    def set_language():
        culture = request.form.get("culture", "")
        return_url = request.form.get("return_url")
        target = return_url if is_local_url(return_url) else "/"

        response = redirect(target)
        if culture:
            response.set_cookie(
                CULTURE_COOKIE,
                culture,
                max_age=CULTURE_COOKIE_MAX_AGE,
                samesite="Lax",
            )
            logger.info("Language set to %s", culture)
        return response


def register_error_handlers(app: Flask) -> None:
    """Turn pipeline errors into structured JSON responses."""

    @app.errorhandler(TranslationError)
    def translation_error(e: TranslationError):
        status = next(
            (code for error_type, code in ERROR_STATUS.items() if isinstance(e, error_type)),
            500,
        )
        if status >= 500:
            logger.exception("Page translation failed: %s", e)
        else:
            logger.warning("Page translation rejected: %s", e)

        payload = {"error": str(e), "code": e.code}
        if e.details:
            payload["details"] = e.details
        return jsonify(payload), status

    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify({"error": "Page not found", "code": "not_found"}), 404
