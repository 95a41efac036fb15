"""Market data services: the Polygon client and the mock-mode generator.

Re-exports all public service classes so consumers can import directly:
    from Stock_Analyzer.services import MarketDataClient, MockDataGenerator
"""

from Stock_Analyzer.services.market_data import MarketDataClient
from Stock_Analyzer.services.mock_data import (
    MockDataGenerator,
    mock_recommendation,
    mock_snapshot,
)

__all__ = [
    "MarketDataClient",
    "MockDataGenerator",
    "mock_recommendation",
    "mock_snapshot",
]
