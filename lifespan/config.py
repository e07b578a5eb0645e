"""Calculator defaults, input bounds and app settings."""

# Default calculator state
DEFAULT_INFLATION_PERCENT = 3.0
DEFAULT_ASSET_GROWTH_PERCENT = 7.0
DEFAULT_EXTRA_YEARS = 10
DEFAULT_ANNUAL_EXPENSE = 60_000.0
DEFAULT_STARTING_PORTFOLIO = 1_000_000.0

# Input ranges (inclusive); sliders cannot leave them, so requests are clamped
INFLATION_PERCENT_RANGE = (0.0, 20.0)
ASSET_GROWTH_PERCENT_RANGE = (-10.0, 30.0)
EXTRA_YEARS_RANGE = (0, 60)
ANNUAL_EXPENSE_RANGE = (0.0, 10_000_000.0)
STARTING_PORTFOLIO_RANGE = (0.0, 5_000_000.0)

# Reference price
PRICE_ASSET = "bitcoin"
PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"
FALLBACK_PRICE = 100_000.0
PRICE_TIMEOUT = 10  # seconds

# Memoized projections kept per process
PROJECTION_CACHE_SIZE = 256


def default_settings() -> dict:
    """Flask config mapping; override with LIFESPAN_* env vars or create_app(config=...)."""
    return {
        "PRICE_ASSET": PRICE_ASSET,
        "PRICE_URL": PRICE_URL,
        "FALLBACK_PRICE": FALLBACK_PRICE,
        "PRICE_TIMEOUT": PRICE_TIMEOUT,
        "FETCH_PRICE_ON_STARTUP": True,
        "CORS_ORIGINS": [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        "LOG_LEVEL": "INFO",
    }
