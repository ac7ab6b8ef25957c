def _resolver():
    # metadata.canonical imports app.gog.client; resolve lazily to avoid a cycle.
    from metadata.canonical import get_game_metadata_resolver

    return get_game_metadata_resolver()


def fetch_by_title(title: str, platform_filter=None, max_results: int = 10):
    return _resolver().fetch_by_title(title, platform_filter, max_results)


def fetch_by_id(id: str):
    return _resolver().fetch_by_id(id)


__all__ = [
    "fetch_by_title",
    "fetch_by_id",
]
