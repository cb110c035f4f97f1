"""Watch sessions keyed by browser cookie."""

import uuid
from dataclasses import dataclass

from cachetools import TTLCache

from streamit.api.html_gateway import HtmlRenderGateway
from streamit.services.navigation import WatchController


@dataclass
class WatchSession:
    """A controller together with the gateway it paints into."""

    controller: WatchController
    gateway: HtmlRenderGateway


class SessionStore:
    """Bounded, expiring map of session id -> WatchSession.

    Expired sessions are rebuilt from the page URL by the web layer, so
    losing one only costs a catalog round trip.
    """

    def __init__(self, maxsize: int = 1024, ttl: float = 6 * 60 * 60) -> None:
        self._sessions: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    def get(self, session_id: str | None) -> WatchSession | None:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def put(self, session_id: str, session: WatchSession) -> None:
        self._sessions[session_id] = session

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
