"""Project root entry point for launching the web interface."""

from __future__ import annotations

import os

from pagetrans.config import validate_translation_config
from pagetrans.errors import TranslationError
from pagetrans.logger import get_logger

logger = get_logger(__name__)


def main():
    from pagetrans.web import create_app

    try:
        validate_translation_config()
    except TranslationError as e:
        # Pages in the source language still work without a provider
        logger.warning("Translation provider not ready: %s", e)

    app = create_app()
    app.run(
        host=os.environ.get("PAGETRANS_HOST", "127.0.0.1"),
        port=int(os.environ.get("PAGETRANS_PORT", "5500")),
        debug=os.environ.get("PAGETRANS_DEBUG", "").lower() in ("1", "true", "yes"),
    )


if __name__ == "__main__":
    main()
