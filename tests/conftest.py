"""Shared fixtures for Stock Industry Mapper tests."""

import sys
from collections import OrderedDict
from pathlib import Path

import pytest

# Ensure project root is importable
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from industry_mapper import IndustryMapper
from notifications import ToastQueue
from page_state import HomePage
from watchlist_store import WatchlistStore


SAMPLE_CSV = """Symbol,Name,Exchange,Sector,Industry,Market Cap,PE Ratio,EPS,Dividend Yield
AAPL,Apple Inc.,NASDAQ,Technology,Consumer Electronics,3400.5,33.1,6.42,0.44
MSFT,Microsoft Corporation,NASDAQ,Technology,Software - Infrastructure,3150.2,35.4,11.80,0.72
NVDA,NVIDIA Corporation,NASDAQ,Technology,Semiconductors,3320.0,54.7,2.53,0.03
AMD,Advanced Micro Devices Inc.,NASDAQ,Technology,Semiconductors,230.4,120.5,1.18,
INTC,Intel Corporation,NASDAQ,Technology,Semiconductors,88.2,,-4.38,
JPM,JPMorgan Chase & Co.,NYSE,Financial Services,Banks - Diversified,690.3,13.4,19.79,2.00
XOM,Exxon Mobil Corporation,NYSE,Energy,Oil & Gas Integrated,470.1,15.2,7.41,3.50
CVX,Chevron Corporation,NYSE,Energy,Oil & Gas Integrated,270.6,16.8,9.01,4.40
"""


@pytest.fixture
def sample_csv(tmp_path):
    """An 8-symbol industry dataset on disk."""
    path = tmp_path / "industry_data.csv"
    path.write_text(SAMPLE_CSV)
    return path


@pytest.fixture
def mapper(sample_csv):
    """An initialized mapper over the sample dataset."""
    m = IndustryMapper(csv_path=str(sample_csv), data_url='')
    m.initialize()
    return m


@pytest.fixture
def watchlist(tmp_path):
    return WatchlistStore(watchlist_file=str(tmp_path / "watchlist.json"), persist=True)


@pytest.fixture
def page_factory(sample_csv, watchlist):
    """Builds HomePages over the sample dataset that share one watchlist."""
    shared = IndustryMapper(csv_path=str(sample_csv), data_url='')

    def factory():
        return HomePage(
            mapper_factory=lambda: shared,
            watchlist=watchlist,
            toasts=ToastQueue(),
            init_timeout=5.0,
        )
    return factory


@pytest.fixture
def page(page_factory):
    """A HomePage whose mapper loads the sample dataset."""
    return page_factory()


@pytest.fixture
def client(page_factory, monkeypatch):
    """Flask test client; each browser session gets its own sample-data page."""
    import mapper_app
    monkeypatch.setattr(mapper_app, 'create_page', page_factory)
    monkeypatch.setattr(mapper_app, '_pages', OrderedDict())
    mapper_app.app.config['TESTING'] = True
    with mapper_app.app.test_client() as c:
        yield c
