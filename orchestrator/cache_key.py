from collections.abc import Sequence


def build_cache_key(
    host: str,
    port: int,
    query: str,
    page: int,
    safe_search_level: int,
    engines: Sequence[str],
) -> str:
    """
    Build the cache key for one results page.

    The key keeps the URL-shaped layout shared with other deployments of the
    cache, so the query and engine names are embedded unescaped and engines
    keep the order given by the caller. A query containing "&", "=" or an
    engine name containing "," can therefore collide with another request.
    """
    return (
        f"http://{host}:{port}/search?q={query}&page={page}"
        f"&safesearch={safe_search_level}&engines={','.join(engines)}"
    )
