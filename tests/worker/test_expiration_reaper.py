# tests/worker/test_expiration_reaper.py
"""
Тесты для ExpirationReaper (driver_locator/worker/expiration_reaper.py).
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from driver_locator.common.exceptions import StoreUnavailableError
from driver_locator.worker.expiration_reaper import ExpirationReaper


@pytest.fixture
def reaper(mock_redis: MagicMock, mock_store: AsyncMock) -> ExpirationReaper:
    return ExpirationReaper(
        redis=mock_redis,
        store=mock_store,
        min_delay=0.01,
        max_delay=0.05,
        poll_timeout=0.01,
    )


def _pmessage(key: Any) -> dict[str, Any]:
    return {
        "type": "pmessage",
        "pattern": "__keyevent@0__:expired",
        "channel": "__keyevent@0__:expired",
        "data": key,
    }


class TestReaperSetup:
    """Тесты канала и префикса."""

    def test_name(self, reaper: ExpirationReaper) -> None:
        assert reaper.name == "expiration_reaper"

    def test_channel_uses_logical_db(self, reaper: ExpirationReaper, mock_redis: MagicMock) -> None:
        assert reaper.channel == "__keyevent@0__:expired"
        mock_redis.db = 3
        assert reaper.channel == "__keyevent@3__:expired"

    def test_detail_prefix_includes_namespace(self, reaper: ExpirationReaper) -> None:
        assert reaper.detail_prefix == "locator_test:driver:"


class TestHandleExpiredKey:
    """Тесты обработки истёкших ключей."""

    @pytest.mark.asyncio
    async def test_driver_key_removes_from_indexes(
        self,
        reaper: ExpirationReaper,
        mock_store: AsyncMock,
    ) -> None:
        driver_id = await reaper.handle_expired_key("locator_test:driver:d3")

        assert driver_id == "d3"
        mock_store.remove.assert_awaited_once_with("d3")
        assert reaper.stats()["processed"] == 1

    @pytest.mark.asyncio
    async def test_driver_id_with_colons(self, reaper: ExpirationReaper, mock_store: AsyncMock) -> None:
        """Снимается только префикс, остальное — id как есть."""
        await reaper.handle_expired_key("locator_test:driver:fleet:42")
        mock_store.remove.assert_awaited_once_with("fleet:42")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "key",
        [
            "locator_test:session:abc",
            "driver:d3",  # чужой namespace
            "other:driver:d3",
            "locator_test:driver:",
        ],
    )
    async def test_foreign_keys_ignored(
        self,
        reaper: ExpirationReaper,
        mock_store: AsyncMock,
        key: str,
    ) -> None:
        assert await reaper.handle_expired_key(key) is None
        mock_store.remove.assert_not_called()
        assert reaper.stats()["ignored"] == 1

    @pytest.mark.asyncio
    async def test_cleanup_failure_logged_and_swallowed(
        self,
        reaper: ExpirationReaper,
        mock_store: AsyncMock,
    ) -> None:
        mock_store.remove.side_effect = StoreUnavailableError("remove")

        driver_id = await reaper.handle_expired_key("locator_test:driver:d3")

        assert driver_id == "d3"
        assert reaper.stats()["failed"] == 1
        assert reaper.stats()["processed"] == 0

    @pytest.mark.asyncio
    async def test_next_event_processed_after_failure(
        self,
        reaper: ExpirationReaper,
        mock_store: AsyncMock,
    ) -> None:
        mock_store.remove.side_effect = [StoreUnavailableError("remove"), None]

        await reaper.handle_expired_key("locator_test:driver:d3")
        await reaper.handle_expired_key("locator_test:driver:d4")

        assert reaper.stats()["failed"] == 1
        assert reaper.stats()["processed"] == 1


class TestHandleMessage:
    """Тесты разбора сообщений Pub/Sub."""

    @pytest.mark.asyncio
    async def test_pmessage_str(self, reaper: ExpirationReaper, mock_store: AsyncMock) -> None:
        await reaper.handle_message(_pmessage("locator_test:driver:d1"))
        mock_store.remove.assert_awaited_once_with("d1")

    @pytest.mark.asyncio
    async def test_pmessage_bytes(self, reaper: ExpirationReaper, mock_store: AsyncMock) -> None:
        await reaper.handle_message(_pmessage(b"locator_test:driver:d1"))
        mock_store.remove.assert_awaited_once_with("d1")

    @pytest.mark.asyncio
    async def test_subscribe_confirmation_ignored(
        self,
        reaper: ExpirationReaper,
        mock_store: AsyncMock,
    ) -> None:
        await reaper.handle_message({"type": "psubscribe", "data": 1})
        mock_store.remove.assert_not_called()


class TestReaperLoop:
    """Тесты цикла подписки."""

    @pytest.mark.asyncio
    async def test_run_drains_messages_and_closes_pubsub(
        self,
        reaper: ExpirationReaper,
        mock_redis: MagicMock,
        mock_store: AsyncMock,
    ) -> None:
        pubsub = MagicMock()
        pubsub.psubscribe = AsyncMock()
        pubsub.aclose = AsyncMock()
        mock_redis.pubsub = MagicMock(return_value=pubsub)

        messages = [
            _pmessage("locator_test:driver:d3"),
            None,
            _pmessage("locator_test:other"),
            _pmessage("locator_test:driver:d4"),
        ]

        async def get_message(**kwargs: Any) -> dict[str, Any] | None:
            if messages:
                return messages.pop(0)
            reaper._running = False
            return None

        pubsub.get_message = AsyncMock(side_effect=get_message)
        reaper._running = True

        await reaper._run()

        pubsub.psubscribe.assert_awaited_once_with("__keyevent@0__:expired")
        assert [c.args[0] for c in mock_store.remove.await_args_list] == ["d3", "d4"]
        pubsub.aclose.assert_awaited_once()
        assert reaper.stats() == {"processed": 2, "ignored": 1, "failed": 0, "restarts": 0}

    @pytest.mark.asyncio
    async def test_run_survives_non_utf8_key(
        self,
        reaper: ExpirationReaper,
        mock_redis: MagicMock,
        mock_store: AsyncMock,
    ) -> None:
        """Ключ не в UTF-8 пропускается, подписка продолжает работать."""
        pubsub = MagicMock()
        pubsub.psubscribe = AsyncMock()
        pubsub.aclose = AsyncMock()
        mock_redis.pubsub = MagicMock(return_value=pubsub)

        events: list[Any] = [
            UnicodeDecodeError("utf-8", b"\xff\xfe", 0, 1, "invalid start byte"),
            _pmessage("locator_test:driver:d3"),
        ]

        async def get_message(**kwargs: Any) -> dict[str, Any] | None:
            if events:
                event = events.pop(0)
                if isinstance(event, Exception):
                    raise event
                return event
            reaper._running = False
            return None

        pubsub.get_message = AsyncMock(side_effect=get_message)
        reaper._running = True

        await reaper._run()

        mock_store.remove.assert_awaited_once_with("d3")
        pubsub.aclose.assert_awaited_once()
        assert reaper.stats()["ignored"] == 1
        assert reaper.stats()["processed"] == 1

    @pytest.mark.asyncio
    async def test_run_closes_pubsub_when_stream_breaks(
        self,
        reaper: ExpirationReaper,
        mock_redis: MagicMock,
    ) -> None:
        pubsub = MagicMock()
        pubsub.psubscribe = AsyncMock()
        pubsub.aclose = AsyncMock()
        pubsub.get_message = AsyncMock(side_effect=ConnectionError("closed"))
        mock_redis.pubsub = MagicMock(return_value=pubsub)
        reaper._running = True

        with pytest.raises(ConnectionError):
            await reaper._run()

        pubsub.aclose.assert_awaited_once()
