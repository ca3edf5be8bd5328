"""Streaming crypto prices for the dashboard header.

Two always-on WebSocket subscriptions feed an in-memory price board:

- MEXC contract deals (``sub.deal``) for BTC/ETH/SOL/XRP perpetuals, which
  also needs an application-level ``ping`` every 20 seconds.
- Binance spot trades via the combined-stream endpoint for BTC/ETH.

The board is display-only; nothing here touches the trade ledger. Each feed
runs as an asyncio task that reconnects after a fixed delay on any error.
"""

import asyncio
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

import websockets

from journal.config import settings
from journal.utils.constants import BINANCE_STREAMS, MEXC_STREAM_SYMBOLS

logger = logging.getLogger(__name__)


@dataclass
class PriceTick:
    symbol: str
    price: float
    source: str
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class PriceBoard:
    """Latest price per symbol, overwritten by every tick."""

    def __init__(self):
        self._ticks: dict[str, PriceTick] = {}

    def update(self, tick: PriceTick):
        self._ticks[tick.symbol] = tick

    def get(self, symbol: str) -> PriceTick | None:
        return self._ticks.get(symbol)

    def snapshot(self) -> dict[str, dict]:
        return {
            symbol: {**asdict(tick), "received_at": tick.received_at.isoformat()}
            for symbol, tick in sorted(self._ticks.items())
        }


class PriceFeed:
    """Base class: connect, subscribe, parse messages, reconnect forever."""

    name = "feed"

    def __init__(self, url: str, board: PriceBoard, reconnect_seconds: float = 5.0):
        self.url = url
        self.board = board
        self.reconnect_seconds = reconnect_seconds
        self.connected = False
        self.messages_received = 0
        self.reconnects = 0
        self.last_error: str | None = None

    def subscribe_messages(self) -> list[dict]:
        return []

    def parse_message(self, raw: str | bytes) -> PriceTick | None:
        raise NotImplementedError

    def handle_message(self, raw: str | bytes) -> PriceTick | None:
        """Parse one frame and publish any tick to the board."""
        self.messages_received += 1
        try:
            tick = self.parse_message(raw)
        except (ValueError, KeyError, TypeError, IndexError) as e:
            logger.debug(f"{self.name}: ignoring unparseable message: {e}")
            return None
        if tick is not None:
            self.board.update(tick)
        return tick

    async def _session(self, ws):
        for message in self.subscribe_messages():
            await ws.send(json.dumps(message))
        async for raw in ws:
            self.handle_message(raw)

    async def run_forever(self):
        while True:
            try:
                async with websockets.connect(self.url) as ws:
                    self.connected = True
                    self.last_error = None
                    logger.info(f"{self.name}: connected to {self.url}")
                    await self._session(ws)
                logger.warning(f"{self.name}: connection closed by server")
            except Exception as e:
                self.last_error = f"{type(e).__name__}: {e}"
                logger.warning(f"{self.name}: stream error: {self.last_error}")
            finally:
                self.connected = False

            self.reconnects += 1
            await asyncio.sleep(self.reconnect_seconds)

    def status(self) -> dict:
        return {
            "name": self.name,
            "url": self.url,
            "connected": self.connected,
            "messages_received": self.messages_received,
            "reconnects": self.reconnects,
            "last_error": self.last_error,
        }


class MexcDealFeed(PriceFeed):
    name = "mexc"

    def __init__(
        self,
        url: str,
        board: PriceBoard,
        symbols: list[str] | None = None,
        ping_seconds: float = 20.0,
        reconnect_seconds: float = 5.0,
    ):
        super().__init__(url, board, reconnect_seconds)
        self.symbols = symbols or list(MEXC_STREAM_SYMBOLS)
        self.ping_seconds = ping_seconds

    def subscribe_messages(self) -> list[dict]:
        return [
            {"method": "sub.deal", "param": {"symbol": symbol}, "id": i}
            for i, symbol in enumerate(self.symbols, start=1)
        ]

    def parse_message(self, raw: str | bytes) -> PriceTick | None:
        msg = json.loads(raw)
        if msg.get("channel") != "push.deal" or not msg.get("data"):
            return None
        deal = msg["data"]
        if isinstance(deal, list):
            deal = deal[-1]
        return PriceTick(symbol=msg["symbol"], price=float(deal["p"]), source=self.name)

    async def _ping_loop(self, ws):
        while True:
            await asyncio.sleep(self.ping_seconds)
            await ws.send(json.dumps({"method": "ping"}))

    async def _session(self, ws):
        pinger = asyncio.create_task(self._ping_loop(ws))
        try:
            await super()._session(ws)
        finally:
            pinger.cancel()


class BinanceTradeFeed(PriceFeed):
    name = "binance"

    def __init__(
        self,
        base_url: str,
        board: PriceBoard,
        streams: dict[str, str] | None = None,
        reconnect_seconds: float = 5.0,
    ):
        self.streams = streams or dict(BINANCE_STREAMS)
        super().__init__(f"{base_url}?streams={'/'.join(self.streams)}", board, reconnect_seconds)

    def parse_message(self, raw: str | bytes) -> PriceTick | None:
        msg = json.loads(raw)
        symbol = self.streams.get(msg.get("stream", ""))
        if symbol is None:
            return None
        return PriceTick(symbol=symbol, price=float(msg["data"]["p"]), source=self.name)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

price_board = PriceBoard()

_feeds: list[PriceFeed] = []
_tasks: list[asyncio.Task] = []


def build_feeds(board: PriceBoard) -> list[PriceFeed]:
    return [
        MexcDealFeed(
            settings.mexc_ws_url,
            board,
            ping_seconds=settings.stream_ping_seconds,
            reconnect_seconds=settings.stream_reconnect_seconds,
        ),
        BinanceTradeFeed(
            settings.binance_ws_url,
            board,
            reconnect_seconds=settings.stream_reconnect_seconds,
        ),
    ]


def start_price_streams():
    """Start every feed as a background task on the running loop."""
    if _tasks:
        return
    _feeds[:] = build_feeds(price_board)
    for feed in _feeds:
        _tasks.append(asyncio.create_task(feed.run_forever(), name=f"price-stream-{feed.name}"))
    logger.info(f"Price streams started: {', '.join(f.name for f in _feeds)}")


async def stop_price_streams():
    for task in _tasks:
        task.cancel()
    await asyncio.gather(*_tasks, return_exceptions=True)
    _tasks.clear()
    logger.info("Price streams stopped")


def get_stream_status() -> dict:
    return {
        "running": bool(_tasks),
        "feeds": [feed.status() for feed in _feeds],
    }
