"""CSS-selector extraction for the comic site's pages.

Selectors track the site's current markup and break whenever it changes.
Items missing a title or a slug are skipped rather than returned half-empty.
"""

from collections.abc import Callable, Iterable
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

PAGE_KINDS = ("home", "genres", "genre", "latest", "search", "detail", "chapter")


def _text(node: Tag | None, selector: str) -> str:
    if node is None:
        return ""
    found = node.select_one(selector)
    return found.get_text(strip=True) if found else ""


def _attr(node: Tag | None, selector: str, *names: str) -> str | None:
    """First non-empty attribute among ``names`` on the first match."""
    if node is None:
        return None
    found = node.select_one(selector)
    if found is None:
        return None
    for name in names:
        value = found.get(name)
        if value:
            return value.strip()
    return None


def _path_segments(url: str | None) -> list[str]:
    if not url:
        return []
    return [seg for seg in urlparse(url).path.split("/") if seg]


def comic_slug(url: str | None) -> str | None:
    """Slug from a comic URL such as ``/komik/<slug>/``."""
    segments = _path_segments(url)
    return segments[1] if len(segments) > 1 else None


def last_segment(url: str | None) -> str | None:
    segments = _path_segments(url)
    return segments[-1] if segments else None


def _comic_cards(cards: Iterable[Tag]) -> list[dict]:
    """Cards from the ``.utao`` update lists used on home, latest and genre pages."""
    comics = []
    for card in cards:
        title = _text(card, ".luf a h3")
        slug = comic_slug(_attr(card, ".imgu a", "href"))
        if title and slug:
            comics.append({
                "title": title,
                "chapter": _text(card, ".luf ul li:first-child a"),
                "cover": _attr(card, ".imgu a img", "data-src", "src"),
                "endpoint": slug,
            })
    return comics


def _extract_home(soup: BeautifulSoup) -> dict:
    first_list = soup.select_one("div.listupd")
    recommended = _comic_cards(first_list.select(".utao") if first_list else [])

    popular = []
    for item in soup.select(".bixbox.series-gen .list-series li"):
        title = _text(item, ".title a")
        slug = comic_slug(_attr(item, "a", "href"))
        if title and slug:
            popular.append({
                "title": title,
                "chapter": _text(item, ".chapter a"),
                "cover": _attr(item, "img", "data-src", "src"),
                "endpoint": slug,
            })

    return {"recommended": recommended, "popular": popular}


def _extract_latest(soup: BeautifulSoup) -> dict:
    # The first list on the page is the "hot" block shown on home.
    cards = [card for block in soup.select("div.listupd")[1:] for card in block.select(".utao")]
    return {"comics": _comic_cards(cards)}


def _extract_genre(soup: BeautifulSoup) -> dict:
    return {"comics": _comic_cards(soup.select("div.listupd .utao"))}


def _extract_genres(soup: BeautifulSoup) -> dict:
    genres = []
    for link in soup.select(".genrez li a"):
        name = link.get_text(strip=True)
        slug = last_segment(link.get("href"))
        if name and slug:
            genres.append({"genreName": name, "endpoint": slug})
    return {"genres": genres}


def _extract_search(soup: BeautifulSoup) -> dict:
    results = []
    for item in soup.select("div.list-update_item"):
        title = _text(item, "h3.title a")
        slug = comic_slug(_attr(item, "a", "href"))
        if title and slug:
            results.append({
                "title": title,
                "cover": _attr(item, "a img", "src"),
                "type": _text(item, ".type"),
                "endpoint": slug,
            })
    return {"results": results}


def _extract_detail(soup: BeautifulSoup) -> dict:
    chapters = []
    for item in soup.select(".komik_info-chapters-item"):
        title = _text(item, "a")
        slug = last_segment(_attr(item, "a", "href"))
        if title and slug:
            chapters.append({"chapterTitle": title, "chapterEndpoint": slug})
    # Site lists newest first
    chapters.reverse()

    return {
        "title": _text(soup, "h1.komik_info-content-body-title"),
        "cover": _attr(soup, ".komik_info-content-thumbnail img", "src"),
        "synopsis": "\n".join(
            p.get_text(strip=True) for p in soup.select(".komik_info-description-sinopsis p")
        ).strip(),
        "chapters": chapters,
    }


def _extract_chapter(soup: BeautifulSoup) -> dict:
    images = [
        img["src"].strip()
        for img in soup.select(".main-reading-area img")
        if img.get("src", "").strip()
    ]
    return {"images": images}


_EXTRACTORS: dict[str, Callable[[BeautifulSoup], dict]] = {
    "home": _extract_home,
    "genres": _extract_genres,
    "genre": _extract_genre,
    "latest": _extract_latest,
    "search": _extract_search,
    "detail": _extract_detail,
    "chapter": _extract_chapter,
}


def extract(html: str, page_kind: str) -> dict:
    """Parse ``html`` as a page of kind ``page_kind`` into a JSON-ready dict."""
    extractor = _EXTRACTORS.get(page_kind)
    if extractor is None:
        raise ValueError(f"Unknown page kind: {page_kind}. Supported: {list(PAGE_KINDS)}")
    return extractor(BeautifulSoup(html, "html.parser"))
