"""Safe-search level resolution across cookie, URL and server config."""

# Levels at or above this value cannot be requested through the URL.
URL_STRICT_TIER = 3


def resolve_safe_search_level(
    stored_level: int | None, request_level: int | None, server_default: int
) -> int:
    """
    Combine the three safe-search signals into the effective level.

    The URL parameter is the least trusted input. It may select any level below
    the strict tier, but a URL asking for level 3 or 4 gets the server default
    instead. This asymmetry is server policy and must be kept as is.

    Args:
        stored_level: Level from the user's stored preferences (cookie), if any
        request_level: Level from the `safesearch` query parameter, if any
        server_default: Level configured on the server

    Returns:
        The effective safe-search level
    """
    if request_level is not None:
        if request_level >= URL_STRICT_TIER:
            return server_default
        return request_level

    if stored_level is not None:
        return stored_level
    return server_default
