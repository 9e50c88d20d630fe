"""Application settings and configuration."""
import os
from pathlib import Path
from dotenv import load_dotenv

ENV_PATH = Path(__file__).resolve().parent / '.env'
load_dotenv(dotenv_path=ENV_PATH)


class Settings:
    """
    Riot rate limits are enforced twice upstream: once per platform
    (na1, euw1, ...) and once per routing continent (americas, europe, ...).
    The limiter table below mirrors the production key quotas; lower them
    for a personal development key.
    """

    RIOT_API_KEY: str = os.getenv('RIOT_API_KEY', '')
    CRON_SECRET:  str = os.getenv('CRON_SECRET', '')

    # ── Rate limits: (max requests, window seconds) ────────────────────────
    CONTINENT_RATE_LIMITS: dict = {
        'match':            (250, 10.0),
        'matches-by-puuid': (600, 10.0),
    }
    REGION_RATE_LIMITS: dict = {
        'summoner':           (1600, 60.0),
        'league-challenger':  (30,   10.0),
        'league-grandmaster': (30,   10.0),
        'league-master':      (30,   10.0),
        'league-entries':     (250,  10.0),
        'league-summoner':    (60,   60.0),
        'default':            (20,   10.0),
    }

    # ── Paths ──────────────────────────────────────────────────────────────
    BASE_DIR:    Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR:    Path = BASE_DIR / 'data'
    DB_PATH:     Path = Path(os.getenv('DB_PATH', str(DATA_DIR / 'db' / 'tft_stats.sqlite')))
    MAPPING_DIR: Path = Path(os.getenv('MAPPING_DIR', str(DATA_DIR / 'mapping')))
    LOG_DIR:     Path = Path(os.getenv('LOG_DIR', str(DATA_DIR / 'logs')))

    # ── HTTP ───────────────────────────────────────────────────────────────
    REQUEST_TIMEOUT:  float = float(os.getenv('REQUEST_TIMEOUT', '15'))
    MAX_RETRIES:      int   = int(os.getenv('MAX_RETRIES', '5'))
    RETRY_BASE_DELAY: float = float(os.getenv('RETRY_BASE_DELAY', '1.0'))

    # ── Region processing ──────────────────────────────────────────────────
    MATCHES_PER_REGION: int   = int(os.getenv('MATCHES_PER_REGION', '100'))
    TOP_PLAYERS:        int   = int(os.getenv('TOP_PLAYERS', '10'))
    MATCH_BATCH_SIZE:   int   = int(os.getenv('MATCH_BATCH_SIZE', '5'))
    MATCH_BATCH_DELAY:  float = float(os.getenv('MATCH_BATCH_DELAY', '0.1'))
    REGION_DELAY:       float = float(os.getenv('REGION_DELAY', '0.2'))

    DISABLED_REGIONS: set = set(
        r.strip().upper()
        for r in os.getenv('DISABLED_REGIONS', '').split(',')
        if r.strip()
    )

    # ── Aggregation & storage ──────────────────────────────────────────────
    MIN_MATCHES_FOR_GLOBAL: int = int(os.getenv('MIN_MATCHES_FOR_GLOBAL', '20'))
    MIN_COMPOSITION_GAMES:  int = int(os.getenv('MIN_COMPOSITION_GAMES', '2'))
    RETENTION_DAYS:         int = int(os.getenv('RETENTION_DAYS', '7'))
    MAX_PAYLOAD_BYTES:      int = int(os.getenv('MAX_PAYLOAD_BYTES', str(4_000_000)))
    MAX_RELATED_COMPS:      int = int(os.getenv('MAX_RELATED_COMPS', '25'))

    # ── API server ─────────────────────────────────────────────────────────
    API_HOST: str = os.getenv('API_HOST', '127.0.0.1')
    API_PORT: int = int(os.getenv('API_PORT', '8000'))

    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def validate(cls) -> None:
        if not cls.RIOT_API_KEY:
            raise ValueError("RIOT_API_KEY must be set in tft_stats/config/.env")

    @classmethod
    def create_directories(cls) -> None:
        cls.DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
