# backoffice/web/flash.py
"""
One-request flash store on top of the Flask session.

Values written during request N are visible during request N+1 only:
``age()`` runs at the start of every request and moves the pending bag out
of the session into request-local storage. Writing the same key twice
before the next request keeps the last value.
"""
from typing import Any, Dict, Optional

from flask import g, session

NEW_FLASH_KEY = "_flash.new"


class FlashBag:

    def put(self, key: str, message: str) -> None:
        pending = dict(session.get(NEW_FLASH_KEY, {}))
        pending[key] = message
        session[NEW_FLASH_KEY] = pending

    def age(self) -> None:
        """Promote the flashes written by the previous request and clear them from the session."""
        g._flash_old = session.pop(NEW_FLASH_KEY, {})

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.peek_all().get(key, default)

    def has(self, key: str) -> bool:
        return key in self.peek_all()

    def peek_all(self) -> Dict[str, Any]:
        return g.get("_flash_old", {})

    def pending(self) -> Dict[str, Any]:
        """Flashes written during this request, to be shown on the next one."""
        return dict(session.get(NEW_FLASH_KEY, {}))
