"""
Remote Module

This module provides the client for the remote translation service.
"""

from pagetrans.remote.client import TranslationClient

__all__ = ['TranslationClient']
