"""HTML rendering for the index and search result pages."""

from html import escape
from urllib.parse import urlencode

from models.search_results import ResultBundle

SEVERITY_CLASSES = {1: "notice", 2: "warning", 3: "error"}


def _page(colorscheme: str, theme: str, animation: str, title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{escape(title)}</title>\n"
        f'<link rel="stylesheet" href="/static/colorschemes/{escape(colorscheme)}.css">\n'
        f'<link rel="stylesheet" href="/static/themes/{escape(theme)}.css">\n'
        f'<link rel="stylesheet" href="/static/animations/{escape(animation)}.css">\n'
        "</head>\n"
        f"<body>\n{body}\n</body>\n"
        "</html>\n"
    )


def _search_form(query: str = "") -> str:
    return (
        '<form class="search_bar" action="/search" method="get">'
        f'<input type="search" name="q" value="{escape(query)}" placeholder="Type to search">'
        '<button type="submit">Search</button>'
        "</form>"
    )


def render_index_page(colorscheme: str, theme: str, animation: str) -> str:
    return _page(colorscheme, theme, animation, "Metasurf", f"<main>{_search_form()}</main>")


def _notice(bundle: ResultBundle) -> str:
    if bundle.disallowed:
        return (
            '<div class="result_disallowed">'
            "<p>Your search has been disallowed by the strict safe search filter.</p>"
            "</div>"
        )
    if bundle.no_engines_selected:
        return (
            '<div class="result_engine_not_selected">'
            "<p>No search engines were selected. Enable at least one engine in settings.</p>"
            "</div>"
        )
    if bundle.filtered:
        return (
            '<div class="result_filtered">'
            "<p>Your search returned no results. The safe search level or an unavailable "
            "engine may have excluded them.</p>"
            "</div>"
        )
    if not bundle.results:
        return '<div class="result_not_found"><p>Your search did not match any documents.</p></div>'
    return ""


def _pagination(query: str, page: int) -> str:
    """Links for the zero-indexed page; the URL parameter stays 1-indexed."""
    links = []
    if page > 0:
        links.append(f'<a href="/search?{escape(urlencode({"q": query, "page": page}))}">Previous</a>')
    links.append(f'<a href="/search?{escape(urlencode({"q": query, "page": page + 2}))}">Next</a>')
    return f'<nav class="page_navigation">{"".join(links)}</nav>'


def render_search_page(
    colorscheme: str, theme: str, animation: str, query: str, bundle: ResultBundle, page: int = 0
) -> str:
    """
    Render one results page.

    Args:
        colorscheme: Colorscheme stylesheet name
        theme: Theme stylesheet name
        animation: Animation stylesheet name
        query: The query as typed by the user
        bundle: Resolved results for the page
        page: Zero-indexed page number

    Returns:
        The HTML document
    """
    parts = [_search_form(query), _notice(bundle)]

    if not bundle.disallowed and bundle.results:
        items = []
        for result in bundle.results:
            items.append(
                '<div class="result">'
                f'<h3><a href="{escape(result.url)}">{escape(result.title)}</a></h3>'
                f'<small>{escape(result.url)}</small>'
                f"<p>{escape(result.description)}</p>"
                f'<div class="upstream_engines">{escape(", ".join(result.engines))}</div>'
                "</div>"
            )
        parts.append(f'<div class="results">{"".join(items)}</div>')

    if bundle.engine_errors:
        errors = "".join(
            f'<li class="{SEVERITY_CLASSES.get(e.severity, "error")}">'
            f"{escape(e.engine)}: {escape(e.error_type)}</li>"
            for e in bundle.engine_errors
        )
        parts.append(f'<ul class="engine_errors">{errors}</ul>')

    if not bundle.disallowed:
        parts.append(_pagination(query, page))

    return _page(colorscheme, theme, animation, f"{query} - Metasurf", "\n".join(p for p in parts if p))
