"""Region and continent enumerations for TFT servers."""
from enum import Enum


class Continent(Enum):
    """Riot routing hosts.

    Regions sharing a continent also share the continental rate-limit pools
    (match ids, match details), which is why the continent fetcher walks them
    one at a time.
    """

    AMERICAS = "americas"
    EUROPE = "europe"
    ASIA = "asia"
    SEA = "sea"

    @property
    def host(self) -> str:
        """Routing host used for match APIs."""
        return f"{self.value}.api.riotgames.com"

    @property
    def regions(self) -> list['Region']:
        """Regions routed through this continent, in processing order."""
        return [r for r in Region if r.continent is self]

    @classmethod
    def from_host(cls, host: str) -> 'Continent | None':
        prefix = host.split('.', 1)[0].lower()
        for continent in cls:
            if continent.value == prefix:
                return continent
        return None


class Region(Enum):
    """TFT platform servers.

    The member name is the short region key stored alongside every match and
    snapshot (``NA``, ``EUW``...); the value is the platform route.
    """

    # Americas
    NA = "na1"     # North America
    BR = "br1"     # Brazil
    LAN = "la1"    # Latin America North
    LAS = "la2"    # Latin America South

    # Europe
    EUW = "euw1"   # Europe West
    EUNE = "eun1"  # Europe Nordic & East
    TR = "tr1"     # Turkey
    RU = "ru"      # Russia

    # Asia
    KR = "kr"      # Korea
    JP = "jp1"     # Japan

    # SEA & Oceania
    OCE = "oc1"    # Oceania

    @property
    def key(self) -> str:
        """Short region key (e.g. ``EUW``)."""
        return self.name

    @property
    def platform_route(self) -> str:
        """Platform routing value for API calls."""
        return self.value

    @property
    def host(self) -> str:
        return f"{self.value}.api.riotgames.com"

    @property
    def continent(self) -> Continent:
        """Continent whose routing host serves this region's matches."""
        return _CONTINENT_BY_REGION[self.name]

    @classmethod
    def from_key(cls, key: str) -> 'Region':
        """Look up a region by key (``euw``) or platform route (``euw1``).

        Raises:
            ValueError: if the value names no known region.
        """
        normalized = (key or '').strip()
        if normalized.upper() in cls.__members__:
            return cls[normalized.upper()]
        for region in cls:
            if region.value == normalized.lower():
                return region
        raise ValueError(f"Unknown region: {key!r}")

    @classmethod
    def from_host(cls, host: str) -> 'Region | None':
        prefix = host.split('.', 1)[0].lower()
        for region in cls:
            if region.value == prefix:
                return region
        return None


_CONTINENT_BY_REGION = {
    "NA": Continent.AMERICAS,
    "BR": Continent.AMERICAS,
    "LAN": Continent.AMERICAS,
    "LAS": Continent.AMERICAS,
    "EUW": Continent.EUROPE,
    "EUNE": Continent.EUROPE,
    "TR": Continent.EUROPE,
    "RU": Continent.EUROPE,
    "KR": Continent.ASIA,
    "JP": Continent.ASIA,
    "OCE": Continent.SEA,
}
