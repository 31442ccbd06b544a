"""FastAPI dependencies for configuration and orchestrator access."""

from config.config import Config
from utils.logger import get_logger

logger = get_logger(__name__)


def get_config() -> Config:
    """Dependency to get the server configuration (singleton pattern)."""
    if not hasattr(get_config, "_instance"):
        config = Config()
        for problem in config.validate():
            logger.warning(f"Configuration problem: {problem}")
        get_config._instance = config
    return get_config._instance


def get_search_orchestrator():
    """Dependency to get the search orchestrator instance (singleton pattern)."""
    from orchestrator.search_orchestrator import SearchOrchestrator
    from tools.web.factory import create_aggregator, create_cache_from_env

    if not hasattr(get_search_orchestrator, "_instance"):
        config = get_config()
        get_search_orchestrator._instance = SearchOrchestrator(
            config, create_cache_from_env(config), create_aggregator()
        )
    return get_search_orchestrator._instance
