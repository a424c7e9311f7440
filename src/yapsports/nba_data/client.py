"""HTTP client for the balldontlie NBA API."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any, Protocol

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from yapsports.nba_data.errors import MissingAPIKeyError, UpstreamError
from yapsports.settings import Settings

logger = logging.getLogger(__name__)

MAX_PAGES = 50


class RetryableStatusError(RuntimeError):
    """Raised for retryable status codes."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        message = f"retryable status {response.status_code}"
        super().__init__(message)

    def retry_after_seconds(self) -> float | None:
        raw_value = self.response.headers.get("Retry-After")
        if not raw_value:
            return None
        try:
            return max(0.0, float(raw_value))
        except ValueError:
            try:
                date_value = parsedate_to_datetime(raw_value)
            except (TypeError, ValueError):
                return None
            now = datetime.now(UTC)
            return max(0.0, (date_value - now).total_seconds())


def _wait_for_retry(retry_state) -> float:
    """Wait strategy for tenacity retries."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    if isinstance(exc, RetryableStatusError):
        retry_after = exc.retry_after_seconds()
        if retry_after is not None:
            return min(retry_after, 30.0)
    return min(2 ** (retry_state.attempt_number - 1), 8.0)


def _array_params(params: dict[str, Any]) -> list[tuple[str, Any]]:
    """Expand list params into the repeated `key[]=value` form upstream expects."""
    out: list[tuple[str, Any]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, set)):
            for item in value:
                out.append((f"{key}[]", item))
        else:
            out.append((key, value))
    return out


class GameGateway(Protocol):
    """Subset of the upstream API consumed by the cache, resolver and backfill."""

    def get_games(self, **params: Any) -> dict[str, Any]: ...

    def get_game(self, game_id: int, *, timeout_s: float | None = None) -> dict[str, Any]: ...

    def get_stats(self, **params: Any) -> dict[str, Any]: ...

    def get_box_scores(self, *, game_ids: list[int]) -> dict[str, Any]: ...


class BallDontLieClient:
    """Thin HTTP client around the balldontlie NBA endpoints."""

    def __init__(self, settings: Settings, *, transport: httpx.BaseTransport | None = None) -> None:
        self.settings = settings
        self._base_url = settings.nba_api_base_url.rstrip("/")
        limits = httpx.Limits(max_connections=8, max_keepalive_connections=4)
        self._http = httpx.Client(
            timeout=settings.nba_api_timeout_s,
            limits=limits,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> BallDontLieClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _request(
        self,
        *,
        path: str,
        params: dict[str, Any],
        timeout_s: float | None = None,
    ) -> dict[str, Any]:
        api_key = str(self.settings.nba_api_key).strip()
        if not api_key:
            raise MissingAPIKeyError(
                "missing NBA API key; set BALLDONTLIE_API_KEY or configure "
                "nba_api.key_files in runtime.toml"
            )
        url = f"{self._base_url}/{path.lstrip('/')}"
        headers = {"Authorization": api_key}
        timeout = timeout_s if timeout_s is not None else self.settings.nba_api_timeout_s
        response: httpx.Response | None = None
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(max(1, self.settings.nba_api_max_retries)),
                retry=retry_if_exception_type(RetryableStatusError),
                wait=_wait_for_retry,
                reraise=True,
            ):
                with attempt:
                    response = self._http.get(
                        url,
                        params=_array_params(params),
                        headers=headers,
                        timeout=timeout,
                    )
                    if response.status_code == 429 or 500 <= response.status_code <= 599:
                        raise RetryableStatusError(response)
                    response.raise_for_status()
        except RetryableStatusError as exc:
            raise UpstreamError(
                f"{path} failed with status {exc.response.status_code} after retries"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"{path} failed with transport error: {exc}") from exc
        if response is None:
            raise UpstreamError(f"{path} failed without a response")

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(f"{path} returned a non-JSON body") from exc
        return payload if isinstance(payload, dict) else {"data": payload}

    def get_games(self, **params: Any) -> dict[str, Any]:
        """List games filtered by seasons, team_ids, game_ids, dates, cursor."""
        return self._request(path="/games", params=params)

    def get_game(self, game_id: int, *, timeout_s: float | None = None) -> dict[str, Any]:
        return self._request(path=f"/games/{int(game_id)}", params={}, timeout_s=timeout_s)

    def get_stats(self, **params: Any) -> dict[str, Any]:
        """List per-game player stat rows filtered by player_ids, seasons, game_ids."""
        return self._request(path="/stats", params=params)

    def get_box_scores(self, *, game_ids: list[int]) -> dict[str, Any]:
        return self._request(path="/box_scores", params={"game_ids": list(game_ids)})

    def get_live_box_scores(self) -> dict[str, Any]:
        return self._request(path="/box_scores/live", params={})

    def get_season_averages(self, *, player_id: int, season: int) -> dict[str, Any]:
        return self._request(
            path="/season_averages",
            params={"player_id": player_id, "season": season},
        )


def iter_pages(
    fetch: Callable[..., dict[str, Any]],
    *,
    max_pages: int = MAX_PAGES,
    **params: Any,
) -> Iterator[dict[str, Any]]:
    """Yield rows across cursor pages until `meta.next_cursor` is absent."""
    cursor: Any = None
    for _ in range(max(1, max_pages)):
        page_params = dict(params)
        if cursor is not None:
            page_params["cursor"] = cursor
        payload = fetch(**page_params)
        rows = payload.get("data")
        if isinstance(rows, list):
            for row in rows:
                if isinstance(row, dict):
                    yield row
        meta = payload.get("meta")
        cursor = meta.get("next_cursor") if isinstance(meta, dict) else None
        if cursor is None:
            return
    logger.warning("pagination stopped after %d pages", max_pages)


def list_games(gateway: GameGateway, **params: Any) -> list[dict[str, Any]]:
    return list(iter_pages(gateway.get_games, **params))


def list_stats(gateway: GameGateway, **params: Any) -> list[dict[str, Any]]:
    return list(iter_pages(gateway.get_stats, **params))
