# tests/test_fetchers.py
"""
Unit tests for the Lichess, Chess.com and generic URL fetchers.

HTTP traffic is answered by `httpx.MockTransport`; no network is used.
"""
import asyncio

import httpx
import pytest

from chess_probe.exceptions import FetchTimeoutError, GameNotFound, InvalidGameReference
from chess_probe.sources.fetchers import chesscom, lichess
from chess_probe.sources.fetchers.chesscom import ChessComFetcher
from chess_probe.sources.fetchers.generic_url import GenericUrlFetcher
from chess_probe.sources.fetchers.lichess import LichessFetcher
from chess_probe.types import ChessComGameMeta


def run(coro):
    return asyncio.run(coro)


async def fetch_with(fetcher_cls, client, url):
    async with client:
        return await fetcher_cls(client).fetch(url)


# --- Lichess ---

@pytest.mark.parametrize("url, expected_id", [
    ("https://lichess.org/abcd1234", "abcd1234"),
    ("https://lichess.org/abcd1234/black", "abcd1234"),
    ("https://lichess.org/abcd1234#32", "abcd1234"),
    ("https://lichess.org/abcd1234?foo=bar", "abcd1234"),
    ("https://lichess.org/abcd1234wxyz", "abcd1234"),
    ("https://lichess.org/game/export/abcd1234", "abcd1234"),
    ("https://lichess.org/game/export/abcd1234.pgn", "abcd1234"),
])
def test_lichess_extract_game_id(url, expected_id):
    assert lichess.extract_game_id(url) == expected_id


def test_lichess_extract_game_id_without_id():
    with pytest.raises(InvalidGameReference):
        lichess.extract_game_id("https://lichess.org/")


def test_lichess_export_url_appends_query_once():
    url = lichess.export_url("abcd1234")
    assert url == "https://lichess.org/game/export/abcd1234?evals=0&clocks=0"
    assert url.count("?evals=0&clocks=0") == 1


def test_lichess_fetch_returns_body_verbatim(make_client, sample_pgn):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text=sample_pgn)

    pgn = run(fetch_with(LichessFetcher, make_client(handler), "https://lichess.org/abcd1234"))

    assert pgn == sample_pgn
    assert seen == ["https://lichess.org/game/export/abcd1234?evals=0&clocks=0"]


def test_lichess_fetch_http_error(make_client):
    client = make_client(lambda request: httpx.Response(404, text="Not found"))
    with pytest.raises(GameNotFound, match="HTTP 404"):
        run(fetch_with(LichessFetcher, client, "https://lichess.org/abcd1234"))


def test_lichess_fetch_timeout(make_client):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(FetchTimeoutError):
        run(fetch_with(LichessFetcher, make_client(handler), "https://lichess.org/abcd1234"))


# --- Chess.com ---

GAME_ID = "98765432101"
GAME_URL = f"https://www.chess.com/game/live/{GAME_ID}"
CALLBACK_URL = f"https://www.chess.com/callback/live/game/{GAME_ID}"
ARCHIVE_URL = "https://api.chess.com/pub/player/topplayer/games/2024/01"

CALLBACK_PAYLOAD = {
    "game": {"id": int(GAME_ID), "pgnHeaders": {"Date": "2024.01.15", "White": "TopPlayer"}},
    "players": {"top": {"username": "TopPlayer"}, "bottom": {"username": "Other"}},
}


def chesscom_handler(archive_games, callback_payload=CALLBACK_PAYLOAD, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if seen is not None:
            seen.append(url)
        if url == CALLBACK_URL:
            return httpx.Response(200, json=callback_payload)
        if url == ARCHIVE_URL:
            return httpx.Response(200, json={"games": archive_games})
        return httpx.Response(404)
    return handler


@pytest.mark.parametrize("url", [
    GAME_URL,
    f"https://www.chess.com/game/live/{GAME_ID}?username=someone",
    f"https://www.chess.com/analysis/game/live/{GAME_ID}?tab=review",
    f"https://www.chess.com/game/live/{GAME_ID}/",
])
def test_chesscom_extract_game_id(url):
    assert chesscom.extract_game_id(url) == GAME_ID


def test_chesscom_fetch_finds_matching_archive_entry(make_client, sample_pgn):
    seen = []
    games = [
        {"url": "https://www.chess.com/game/live/1", "pgn": "[Event \"Other\"]\n\n1. d4 *"},
        {"url": GAME_URL, "pgn": sample_pgn},
        {"url": "https://www.chess.com/game/live/2", "pgn": "[Event \"Other\"]\n\n1. c4 *"},
    ]
    client = make_client(chesscom_handler(games, seen=seen))

    pgn = run(fetch_with(ChessComFetcher, client, GAME_URL))

    assert pgn == sample_pgn
    assert seen == [CALLBACK_URL, ARCHIVE_URL]


def test_chesscom_fetch_no_match(make_client):
    games = [{"url": f"{GAME_URL}0", "pgn": "1. e4 *"}]
    with pytest.raises(GameNotFound, match="not found"):
        run(fetch_with(ChessComFetcher, make_client(chesscom_handler(games)), GAME_URL))


def test_chesscom_fetch_empty_archive(make_client):
    with pytest.raises(GameNotFound):
        run(fetch_with(ChessComFetcher, make_client(chesscom_handler([])), GAME_URL))


@pytest.mark.parametrize("payload", [
    {},
    {"game": {"pgnHeaders": {}}, "players": {"top": {"username": "TopPlayer"}}},
    {"game": {"pgnHeaders": {"Date": "2024.01.15"}}, "players": {}},
    {"game": {"pgnHeaders": {"Date": "15/01/2024"}}, "players": {"top": {"username": "TopPlayer"}}},
    {"game": {"pgnHeaders": {"Date": 2024}}, "players": {"top": {"username": "TopPlayer"}}},
    [],
])
def test_chesscom_bad_callback_shape_is_game_not_found(make_client, payload):
    client = make_client(chesscom_handler([], callback_payload=payload))
    with pytest.raises(GameNotFound):
        run(fetch_with(ChessComFetcher, client, GAME_URL))


def test_chesscom_archive_without_games_field(make_client):
    def handler(request):
        if str(request.url) == CALLBACK_URL:
            return httpx.Response(200, json=CALLBACK_PAYLOAD)
        return httpx.Response(200, json={"archives": []})

    with pytest.raises(GameNotFound, match="missing field 'games'"):
        run(fetch_with(ChessComFetcher, make_client(handler), GAME_URL))


def test_chesscom_invalid_json(make_client):
    client = make_client(lambda request: httpx.Response(200, text="<html>nope</html>"))
    with pytest.raises(GameNotFound, match="not valid JSON"):
        run(fetch_with(ChessComFetcher, client, GAME_URL))


def test_chesscom_callback_failure_short_circuits(make_client):
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(500)

    with pytest.raises(GameNotFound, match="HTTP 500"):
        run(fetch_with(ChessComFetcher, make_client(handler), GAME_URL))
    assert seen == [CALLBACK_URL]


def test_chesscom_sends_user_agent(make_client):
    agents = []

    def handler(request):
        agents.append(request.headers.get("User-Agent", ""))
        return httpx.Response(200, json=CALLBACK_PAYLOAD)

    async def lookup():
        client = make_client(handler)
        async with client:
            return await ChessComFetcher(client).lookup_game_meta(GAME_ID)

    meta = run(lookup())
    assert meta == ChessComGameMeta(game_id=GAME_ID, username="topplayer", year="2024", month="01")
    assert agents[0].startswith("ChessProbe/")


def test_find_game_pgn_requires_exact_url():
    games = [{"url": f"{GAME_URL}?x=1", "pgn": "1. e4 *"}]
    with pytest.raises(GameNotFound):
        chesscom.find_game_pgn(games, GAME_ID)


def test_find_game_pgn_rejects_empty_pgn():
    with pytest.raises(GameNotFound, match="no PGN"):
        chesscom.find_game_pgn([{"url": GAME_URL, "pgn": ""}], GAME_ID)


# --- Generic URL ---

def test_generic_fetch_returns_body(make_client, sample_pgn):
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, text=sample_pgn)

    url = "https://example.com/games/latest?format=pgn"
    assert run(fetch_with(GenericUrlFetcher, make_client(handler), url)) == sample_pgn
    assert seen == [url]


def test_generic_fetch_failure_mentions_plain_text(make_client):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GameNotFound, match="plain-text PGN"):
        run(fetch_with(GenericUrlFetcher, make_client(handler), "https://example.com/game"))


def test_generic_fetch_timeout_keeps_its_kind(make_client):
    def handler(request):
        raise httpx.ConnectTimeout("slow", request=request)

    with pytest.raises(FetchTimeoutError, match="plain-text PGN"):
        run(fetch_with(GenericUrlFetcher, make_client(handler), "https://example.com/game"))


def test_generic_fetch_unsupported_scheme_is_not_found(make_client):
    def handler(request):
        raise httpx.UnsupportedProtocol("Request URL has an unsupported protocol 'ftp://'.", request=request)

    with pytest.raises(GameNotFound, match="plain-text PGN"):
        run(fetch_with(GenericUrlFetcher, make_client(handler), "ftp://example.com/game"))
