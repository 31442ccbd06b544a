import os
from dotenv import load_dotenv
from pathlib import Path
from enum import Enum

from orchestrator.errors import ConfigOrQueryParseError

BLOCKLIST_FILE_NAME = "blocklist.txt"
MAX_SAFE_SEARCH_LEVEL = 4


class CacheBackend(Enum):
    """Supported cache backends."""
    MEMORY = "memory"
    REDIS = "redis"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigOrQueryParseError(f"{name} must be an integer, got {raw!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    raise ConfigOrQueryParseError(f"{name} must be a boolean, got {raw!r}")


def parse_engine_map(raw: str) -> dict[str, bool]:
    """
    Parse an ordered engine map such as "duckduckgo=true,searx=false".

    A bare engine name counts as enabled.
    """
    engines: dict[str, bool] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, flag = item.partition("=")
        name = name.strip()
        if not name:
            raise ConfigOrQueryParseError(f"Empty engine name in UPSTREAM_SEARCH_ENGINES: {raw!r}")
        if not sep:
            engines[name] = True
            continue
        flag = flag.strip().lower()
        if flag not in ("true", "false"):
            raise ConfigOrQueryParseError(f"Engine '{name}' flag must be true or false, got {flag!r}")
        engines[name] = flag == "true"
    return engines


class Config:
    """Configuration management for the search server."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = Path(__file__).parent.parent / '.env'
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Server
        self.BINDING_IP = os.getenv('BINDING_IP', '127.0.0.1')
        self.PORT = _env_int('PORT', 8080)
        self.DEBUG = _env_bool('DEBUG', False)

        # Search
        self.SAFE_SEARCH = _env_int('SAFE_SEARCH', 0)
        self.UPSTREAM_SEARCH_ENGINES = parse_engine_map(
            os.getenv('UPSTREAM_SEARCH_ENGINES', 'duckduckgo=true,searx=true,brave=false')
        )
        self.REQUEST_TIMEOUT = _env_int('REQUEST_TIMEOUT', 30)
        self.RANDOM_DELAY = _env_bool('RANDOM_DELAY', False)
        self.BLOCKLIST_PATH = os.getenv('BLOCKLIST_PATH') or None

        # Style
        self.COLORSCHEME = os.getenv('COLORSCHEME', 'catppuccin-mocha')
        self.THEME = os.getenv('THEME', 'simple')
        self.ANIMATION = os.getenv('ANIMATION', 'simple-frosted-glow')

        # Cache
        self.CACHE_BACKEND = os.getenv('CACHE_BACKEND', CacheBackend.MEMORY.value).lower()
        self.REDIS_URL = os.getenv('REDIS_URL', 'redis://127.0.0.1:6379/0')
        self.CACHE_TTL_SECONDS = _env_int('CACHE_TTL_SECONDS', 600)
        self.CACHE_MAX_ENTRIES = _env_int('CACHE_MAX_ENTRIES', 10000)

    def enabled_engines(self) -> list[str]:
        """Engines enabled by default, in configuration order."""
        return [name for name, enabled in self.UPSTREAM_SEARCH_ENGINES.items() if enabled]

    def blocklist_path(self) -> str:
        """
        Locate the blocklist file.

        BLOCKLIST_PATH wins when set; otherwise the first existing file among the
        user config dir, the system config dir and the repository data dir.

        Returns:
            str: Path to the blocklist (may not exist when nothing was found)
        """
        if self.BLOCKLIST_PATH:
            return self.BLOCKLIST_PATH

        candidates = [
            Path.home() / '.config' / 'metasurf' / BLOCKLIST_FILE_NAME,
            Path('/etc/xdg/metasurf') / BLOCKLIST_FILE_NAME,
            Path(__file__).parent.parent / 'data' / BLOCKLIST_FILE_NAME,
        ]
        for candidate in candidates:
            if candidate.is_file():
                return str(candidate)
        return str(candidates[-1])

    def validate(self) -> list[str]:
        """
        Validate configuration values that parse but are out of range.

        Returns:
            list[str]: Problems found, empty when the configuration is valid
        """
        problems = []
        if not 0 <= self.SAFE_SEARCH <= MAX_SAFE_SEARCH_LEVEL:
            problems.append(
                f"SAFE_SEARCH must be between 0 and {MAX_SAFE_SEARCH_LEVEL}, got {self.SAFE_SEARCH}"
            )
        if self.CACHE_BACKEND not in {b.value for b in CacheBackend}:
            problems.append(
                f"Unknown CACHE_BACKEND '{self.CACHE_BACKEND}'. "
                f"Must be one of: {', '.join(b.value for b in CacheBackend)}"
            )
        if self.REQUEST_TIMEOUT <= 0:
            problems.append(f"REQUEST_TIMEOUT must be positive, got {self.REQUEST_TIMEOUT}")
        if self.CACHE_MAX_ENTRIES <= 0:
            problems.append(f"CACHE_MAX_ENTRIES must be positive, got {self.CACHE_MAX_ENTRIES}")
        if not self.enabled_engines():
            problems.append("No upstream search engine is enabled in UPSTREAM_SEARCH_ENGINES")
        return problems

    def get_server_info(self) -> str:
        """
        Get the address the server binds to.

        Returns:
            str: Formatted host:port string
        """
        return f"{self.BINDING_IP}:{self.PORT}"
