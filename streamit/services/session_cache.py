"""Per-session episode list cache."""

from typing import Dict, List, Optional

from streamit.models.media import Episode


class SeasonCache:
    """Season number -> episode list for one watch session.

    Entries are added on the first successful fetch of a season and are
    never evicted while the session lives.
    """

    def __init__(self) -> None:
        self._seasons: Dict[int, List[Episode]] = {}

    def get(self, season: int) -> Optional[List[Episode]]:
        return self._seasons.get(season)

    def put(self, season: int, episodes: List[Episode]) -> None:
        self._seasons[season] = list(episodes)

    def __contains__(self, season: object) -> bool:
        return season in self._seasons

    def __len__(self) -> int:
        return len(self._seasons)
