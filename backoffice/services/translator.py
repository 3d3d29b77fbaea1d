"""
Localized string lookup backed by JSON catalogs.

Catalogs live in ``backoffice/lang/<locale>.json`` as nested objects and are
addressed with dotted keys, e.g. ``titles.dashboard``. Placeholders use
``str.format`` syntax: ``"Welcome, {name}"``.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_LANG_PATH = Path(__file__).resolve().parent.parent / "lang"


class Translator:

    def __init__(self, locale: str = "en", fallback_locale: str = "en",
                 lang_path: Optional[Path] = None):
        self._locale = locale
        self.fallback_locale = fallback_locale
        self.lang_path = Path(lang_path) if lang_path else DEFAULT_LANG_PATH
        self._catalogs: Dict[str, Dict[str, Any]] = {}

    @property
    def locale(self) -> str:
        return self._locale

    def set_locale(self, locale: str) -> None:
        self._locale = locale

    def load(self, locale: str) -> Dict[str, Any]:
        """Return the catalog for ``locale``; a missing file yields an empty catalog."""
        if locale not in self._catalogs:
            path = self.lang_path / f"{locale}.json"
            if path.exists():
                with path.open(encoding="utf-8") as f:
                    self._catalogs[locale] = json.load(f)
                logger.debug(f"Loaded translation catalog: {path}")
            else:
                logger.warning(f"No translation catalog for locale '{locale}' at {path}")
                self._catalogs[locale] = {}
        return self._catalogs[locale]

    def has(self, key: str, locale: Optional[str] = None) -> bool:
        return self._lookup(key, locale or self._locale) is not None

    def get(self, key: str, replacements: Optional[Mapping[str, Any]] = None,
            locale: Optional[str] = None, default: Optional[str] = None) -> str:
        """
        Translate ``key`` for ``locale`` (current locale by default).

        Falls back to the fallback locale, then to ``default``, then to the
        key itself.
        """
        locale = locale or self._locale
        line = self._lookup(key, locale)
        if line is None and locale != self.fallback_locale:
            line = self._lookup(key, self.fallback_locale)
        if line is None:
            line = key if default is None else default
        if replacements:
            line = line.format_map(dict(replacements))
        return line

    def _lookup(self, key: str, locale: str) -> Optional[str]:
        node: Any = self.load(locale)
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, str) else None
