"""Bundled word list and the dictionary loader."""

from .dictionary import Dictionary, DEFAULT_WORDLIST, get_default_dictionary, check_word

__all__ = ["Dictionary", "DEFAULT_WORDLIST", "get_default_dictionary", "check_word"]
