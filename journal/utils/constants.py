"""Shared constants: ledger target policy and market symbol lists."""

# Per-day profit-rate goal, in percent
DAILY_TARGET_RATE = 0.47

# Monthly goal as a fraction of month-start capital
MONTHLY_TARGET_RATIO = 0.15

# Absolute tolerance for capital continuity between adjacent days
CONTINUITY_TOLERANCE = 0.0001

PROJECTION_MONTHS = 12
DAYS_PER_PROJECTION_MONTH = 30

SMA_PERIOD = 7

# Yahoo Finance chart symbols shown on the market overview
INDEX_NAMES: dict[str, str] = {
    "^DJI": "Dow Jones",
    "SPY": "S&P 500",
    "^IXIC": "NASDAQ",
    "^RUT": "Russell 2000",
    "^FTSE": "FTSE 100",
    "^GDAXI": "DAX",
    "^FCHI": "CAC 40",
    "^N225": "Nikkei 225",
    "^HSI": "Hang Seng",
    "000001.SS": "Shanghai Composite",
    "^KS11": "KOSPI",
    "^KQ11": "KOSDAQ",
}

MEXC_STREAM_SYMBOLS = ["BTC_USDT", "ETH_USDT", "SOL_USDT", "XRP_USDT"]

# Binance combined-stream name -> board symbol
BINANCE_STREAMS: dict[str, str] = {
    "btcusdt@trade": "BTCUSDT",
    "ethusdt@trade": "ETHUSDT",
}
