"""
Funifier API client.

Implements the Job Runner contract on top of the Funifier REST API:
scheduler execution and logs, plus the player-wide clearance checks used
to confirm each cycle change step.
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from cycleshift.exceptions import FunifierAPIError
from cycleshift.funifier.base import JobRunner
from cycleshift.models.clearance import (
    ChallengeProgressClearance,
    LockedPointsClearance,
    PointsClearance,
    VirtualGoodsClearance,
)
from cycleshift.models.config import FunifierConfig
from cycleshift.models.cycle import JobExecutionResult
from cycleshift.utils.logger import get_logger

logger = get_logger("cycleshift.funifier")

# Achievement type holding point and catalog item grants
ACHIEVEMENT_TYPE_POINTS = "0"


class FunifierClient(JobRunner):
    """
    Async client for the Funifier API.

    Example:
        >>> async with FunifierClient(config.funifier) as client:
        ...     result = await client.execute_job("68e7f93a06f77c5c2aad34f1")
        ...     report = await client.check_points_cleared()
    """

    def __init__(
        self,
        config: FunifierConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: Funifier connection settings
            client: Pre-built httpx client (not closed by this wrapper)
        """
        self.config = config or FunifierConfig()
        self._client = client or httpx.AsyncClient(timeout=self.config.request_timeout)
        self._owns_client = client is None

    async def __aenter__(self) -> "FunifierClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this wrapper created it."""
        if self._owns_client:
            await self._client.aclose()

    # ==================== SCHEDULER OPERATIONS ====================

    async def execute_job(self, job_id: str) -> JobExecutionResult:
        """
        Execute a scheduler by id.

        HTTP and transport failures are reported as an unsuccessful result
        rather than raised, so the caller can record them on the step.
        """
        logger.info(f"Executing scheduler [magenta]{job_id}[/]")
        try:
            response = await self._client.get(
                self._url(f"/scheduler/execute/{job_id}"),
                headers=self._headers(),
                timeout=self.config.execute_timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = _json_or_none(e.response)
            return JobExecutionResult(
                success=False,
                message=_error_message(e.response, body),
                logs=_extract_logs(body),
            )
        except httpx.HTTPError as e:
            return JobExecutionResult(
                success=False,
                message=str(e) or type(e).__name__,
            )

        return JobExecutionResult(
            success=True,
            message="Scheduler executed successfully",
            logs=_extract_logs(_json_or_none(response)),
        )

    async def get_job_logs(self, job_id: str, **filters: Any) -> list[dict[str, Any]]:
        """
        Get scheduler execution logs.

        Args:
            job_id: Scheduler id
            **filters: Extra query parameters (max_results, orderby, reverse,
                published_min, published_max)

        Returns:
            Log entries as returned by the API
        """
        params = {"item": job_id, **filters}
        data = await self._request(
            "GET", "/scheduler/log", f"get_scheduler_logs:{job_id}", params=params
        )
        return data or []

    # ==================== PLAYER OPERATIONS ====================

    async def get_all_player_status(self, max_results: int | None = None) -> list[dict[str, Any]]:
        """Get the status of every player."""
        data = await self._request(
            "GET",
            "/player/status",
            "get_all_players_status",
            params={"max_results": max_results or self.config.max_players},
            timeout=self.config.status_timeout,
        )
        return data or []

    async def get_player_status(self, player_id: str) -> dict[str, Any]:
        """Get a fresh status for a single player."""
        data = await self._request(
            "GET", f"/player/{player_id}/status", f"get_player_status:{player_id}"
        )
        return data or {}

    async def get_player_achievements(
        self,
        player_id: str,
        achievement_type: str | None = None,
    ) -> list[dict[str, Any]]:
        """Get a player's achievements, newest first."""
        pipeline: list[dict[str, Any]] = [
            {"$match": {"player": player_id}},
            {"$sort": {"time": -1}},
        ]
        if achievement_type is not None:
            pipeline.insert(1, {"$match": {"type": int(achievement_type)}})

        data = await self._request(
            "POST",
            "/database/achievement/aggregate",
            f"get_player_achievements:{player_id}",
            json=pipeline,
        )
        return data or []

    async def get_action_logs(self, **params: Any) -> list[dict[str, Any]]:
        """Get action log entries."""
        data = await self._request("GET", "/action/log", "get_action_logs", params=params)
        return data or []

    # ==================== CLEARANCE CHECKS ====================

    async def check_points_cleared(self) -> PointsClearance:
        """Check that no player holds unlocked points."""
        offenders, total = await self._check_point_category("points")
        return PointsClearance(
            all_cleared=not offenders,
            players_with_points=offenders,
            total_players_checked=total,
        )

    async def check_locked_points_cleared(self) -> LockedPointsClearance:
        """Check that no player holds locked points."""
        offenders, total = await self._check_point_category("locked_points")
        return LockedPointsClearance(
            all_cleared=not offenders,
            players_with_locked_points=offenders,
            total_players_checked=total,
        )

    async def check_challenge_progress_cleared(self) -> ChallengeProgressClearance:
        """
        Check that challenge progress was reset.

        Progress lives in the action log, so an empty action log means every
        player was reset. This is a single system-level check.
        """
        entries = await self.get_action_logs(max_results=1)
        cleared = len(entries) == 0
        return ChallengeProgressClearance(
            all_cleared=cleared,
            players_with_progress=[] if cleared else ["action_log_not_empty"],
            total_players_checked=1,
        )

    async def check_virtual_goods_cleared(self) -> VirtualGoodsClearance:
        """
        Check that every catalog item was reset.

        All items must be at 0 except the locked item, which must be exactly 1.
        """
        statuses = await self.get_all_player_status()
        offenders: list[str] = []

        for player in statuses:
            if self._items_reset(player.get("catalog_items") or {}):
                continue

            player_id = player["_id"]
            try:
                fresh = await self.get_player_status(player_id)
            except FunifierAPIError as e:
                logger.warning(f"Could not get fresh status for player {player_id}: {e}")
                offenders.append(player_id)
                continue

            if self._items_reset(fresh.get("catalog_items") or {}):
                continue

            try:
                achievements = await self.get_player_achievements(player_id, ACHIEVEMENT_TYPE_POINTS)
                recent_resets = [
                    a for a in achievements
                    if a.get("item")
                    and a.get("item") != self.config.locked_item_id
                    and a.get("value") == 0
                    and self._is_recent(a)
                ]
                if recent_resets:
                    # Reset already recorded, status not caught up yet
                    continue
            except FunifierAPIError as e:
                logger.warning(f"Could not check achievements for player {player_id}: {e}")

            offenders.append(player_id)

        return VirtualGoodsClearance(
            all_cleared=not offenders,
            players_with_extra_items=offenders,
            total_players_checked=len(statuses),
        )

    async def _check_point_category(self, category: str) -> tuple[list[str], int]:
        """
        Find players still holding points of a category.

        A player flagged by the bulk status is re-checked with a fresh
        status; if the points are still there, recent positive grants of
        the category mark it as an offender.
        """
        statuses = await self.get_all_player_status()
        offenders: list[str] = []

        for player in statuses:
            if not _has_points(player, category):
                continue

            player_id = player["_id"]
            try:
                fresh = await self.get_player_status(player_id)
            except FunifierAPIError as e:
                logger.warning(f"Could not get fresh status for player {player_id}: {e}")
                offenders.append(player_id)
                continue

            if not _has_points(fresh, category):
                continue

            try:
                achievements = await self.get_player_achievements(player_id, ACHIEVEMENT_TYPE_POINTS)
                recent_grants = [
                    a for a in achievements
                    if a.get("item") == category
                    and (a.get("value") or 0) > 0
                    and self._is_recent(a)
                ]
                if not recent_grants:
                    continue
            except FunifierAPIError as e:
                logger.warning(f"Could not check achievements for player {player_id}: {e}")

            offenders.append(player_id)

        return offenders, len(statuses)

    def _items_reset(self, catalog_items: dict[str, Any]) -> bool:
        locked = self.config.locked_item_id
        for item_id, quantity in catalog_items.items():
            expected = 1 if item_id == locked else 0
            if quantity != expected:
                return False
        return catalog_items.get(locked) == 1

    def _is_recent(self, achievement: dict[str, Any]) -> bool:
        """Achievement times are epoch milliseconds."""
        achieved_at = achievement.get("time")
        if achieved_at is None:
            return False
        now_ms = time.time() * 1000
        return now_ms - achieved_at < self.config.recent_window_seconds * 1000

    # ==================== HTTP PLUMBING ====================

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self.config.basic_token or "",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a request and decode the JSON body, wrapping failures."""
        try:
            response = await self._client.request(
                method,
                self._url(path),
                headers=self._headers(),
                params=params,
                json=json,
                timeout=timeout or self.config.request_timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = _json_or_none(e.response)
            raise FunifierAPIError(
                operation, _error_message(e.response, body), e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise FunifierAPIError(operation, str(e) or type(e).__name__) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise FunifierAPIError(operation, f"Invalid JSON response: {e}") from e


def _has_points(status: dict[str, Any], category: str) -> bool:
    categories = status.get("point_categories") or {}
    return (categories.get(category) or 0) > 0


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_message(response: httpx.Response, body: Any) -> str:
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text or response.reason_phrase or f"HTTP {response.status_code}"


def _extract_logs(body: Any) -> list[str]:
    if isinstance(body, dict) and isinstance(body.get("logs"), list):
        return [str(line) for line in body["logs"]]
    return []
