"""
Shared fixtures: a fake comic site served through httpx.MockTransport.

No test touches the network. Page markup below mirrors the site's
structure closely enough for the selectors in services/extract.py.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings
from services.cache import TTLCache
from services.comics import ComicService
from services.komikcast_client import KomikcastClient

BASE_URL = "https://komik.test"


def _card(slug: str, title: str, chapter: str, img_attr: str = "data-src") -> str:
    return f"""
    <div class="utao">
      <div class="imgu">
        <a href="{BASE_URL}/komik/{slug}/"><img {img_attr}="https://img.test/{slug}.jpg"></a>
      </div>
      <div class="luf">
        <a href="{BASE_URL}/komik/{slug}/"><h3> {title} </h3></a>
        <ul>
          <li><a href="{BASE_URL}/chapter/{slug}-latest/">{chapter}</a></li>
          <li><a href="{BASE_URL}/chapter/{slug}-older/">Older</a></li>
        </ul>
      </div>
    </div>
    """


HOME_HTML = f"""
<html><body>
  <div class="listupd">
    {_card("solo-leveling", "Solo Leveling", "Ch. 200")}
  </div>
  <div class="listupd">
    {_card("one-piece", "One Piece", "Ch. 1100")}
    <div class="utao">
      <div class="imgu"></div>
      <div class="luf"><a><h3>Broken Card</h3></a></div>
    </div>
  </div>
  <div class="listupd">
    {_card("naruto", "Naruto", "Ch. 700", img_attr="src")}
  </div>
  <div class="bixbox series-gen">
    <div class="list-series"><ul>
      <li>
        <a href="{BASE_URL}/komik/berserk/"><img data-src="https://img.test/berserk.jpg"></a>
        <span class="title"><a href="{BASE_URL}/komik/berserk/">Berserk</a></span>
        <span class="chapter"><a href="{BASE_URL}/chapter/berserk-375/">Ch. 375</a></span>
      </li>
      <li><span class="title"><a>No Link</a></span></li>
    </ul></div>
  </div>
</body></html>
"""

GENRES_HTML = f"""
<html><body>
  <ul class="genrez">
    <li><a href="{BASE_URL}/genres/action/">Action</a></li>
    <li><a href="{BASE_URL}/genres/isekai">Isekai</a></li>
    <li><a href="">Empty</a></li>
  </ul>
</body></html>
"""

GENRE_HTML = f"""
<html><body>
  <div class="listupd">
    {_card("kengan-ashura", "Kengan Ashura", "Ch. 240")}
    {_card("dandadan", "Dandadan", "Ch. 150")}
    {_card("chainsaw-man", "Chainsaw Man", "Ch. 170")}
  </div>
</body></html>
"""

SEARCH_HTML = f"""
<html><body>
  <div class="list-update_item">
    <a href="{BASE_URL}/komik/one-piece/"><img src="https://img.test/one-piece.jpg"></a>
    <span class="type">Manga</span>
    <h3 class="title"><a href="{BASE_URL}/komik/one-piece/">One Piece</a></h3>
  </div>
  <div class="list-update_item">
    <a href="{BASE_URL}/komik/one-punch-man/"><img src="https://img.test/opm.jpg"></a>
    <span class="type">Manga</span>
    <h3 class="title"><a href="{BASE_URL}/komik/one-punch-man/">One Punch Man</a></h3>
  </div>
</body></html>
"""

DETAIL_HTML = f"""
<html><body>
  <div class="komik_info-content-thumbnail"><img src="https://img.test/one-piece-cover.jpg"></div>
  <h1 class="komik_info-content-body-title">One Piece</h1>
  <div class="komik_info-description-sinopsis">
    <p>Gol D. Roger was the King of the Pirates.</p>
    <p>His treasure awaits.</p>
  </div>
  <ul>
    <li class="komik_info-chapters-item"><a href="{BASE_URL}/chapter/one-piece-chapter-2/">Chapter 2</a></li>
    <li class="komik_info-chapters-item"><a href="{BASE_URL}/chapter/one-piece-chapter-1/">Chapter 1</a></li>
  </ul>
</body></html>
"""

CHAPTER_HTML = """
<html><body>
  <div class="main-reading-area">
    <img src=" https://img.test/p1.jpg ">
    <img src="https://img.test/p2.jpg">
    <img data-src="https://img.test/lazy.jpg">
  </div>
</body></html>
"""

EMPTY_HTML = "<html><body></body></html>"


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSite:
    """Request handler standing in for the comic site."""

    def __init__(self):
        self.pages = {
            "/": HOME_HTML,
            "/genres/": GENRES_HTML,
            "/genres/action/": GENRE_HTML,
            "/komik/one-piece/": DETAIL_HTML,
            "/komik/empty/": EMPTY_HTML,
            "/chapter/one-piece-chapter-1/": CHAPTER_HTML,
            "/chapter/empty/": EMPTY_HTML,
        }
        self.requests: list[httpx.Request] = []
        self.error: Exception | None = None
        self.status: int | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.status is not None:
            return httpx.Response(self.status, text="upstream error")
        if request.url.path == "/" and "s" in request.url.params:
            return httpx.Response(200, text=SEARCH_HTML)
        html = self.pages.get(request.url.path)
        if html is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, text=html)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def site():
    return FakeSite()


@pytest.fixture
async def komik_client(site):
    client = KomikcastClient(BASE_URL, user_agent="komik-tests/1.0", timeout=5, transport=site.transport)
    yield client
    await client.aclose()


@pytest.fixture
def service(komik_client, clock):
    return ComicService(komik_client, TTLCache(ttl_seconds=60, clock=clock))


@pytest.fixture
def test_settings():
    settings = Settings()
    settings.base_url = BASE_URL
    settings.cors_origins = ["*"]
    settings.environment = "test"
    settings.git_sha = "abc123"
    settings.cache_ttl_seconds = 300
    settings.cache_max_entries = 0
    settings.cache_sweep_seconds = 0
    return settings


@pytest.fixture
def api(test_settings, site):
    app = create_app(settings=test_settings, transport=site.transport)
    with TestClient(app) as client:
        yield client
