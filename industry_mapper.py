"""
Industry Mapper
===============
Single source of truth for symbol -> industry classification.
Loads the industry dataset, answers lookups, and turns a batch of
user-supplied symbols into mapped/invalid sets plus TradingView and flat exports.
"""

import io
import logging
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

# HTTP client for remote datasets
try:
    from curl_cffi import requests as cffi_requests
    USE_CFFI = True
except ImportError:
    import requests as cffi_requests
    USE_CFFI = False

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(message)s')
logger = logging.getLogger(__name__)

BASE_PATH = Path(__file__).parent
INDUSTRY_DATA_FILE = Path(os.environ.get('INDUSTRY_DATA_FILE', BASE_PATH / "industry_data.csv"))
INDUSTRY_DATA_URL = os.environ.get('INDUSTRY_DATA_URL', '')

REQUIRED_COLUMNS = ['Symbol', 'Name', 'Exchange', 'Sector', 'Industry']
FUNDAMENTAL_COLUMNS = {
    'Market Cap': 'market_cap',
    'PE Ratio': 'pe_ratio',
    'EPS': 'eps',
    'Dividend Yield': 'dividend_yield',
}


class MapperError(Exception):
    """Base error for the industry mapper."""


class DataLoadError(MapperError):
    """The industry dataset could not be loaded."""


class MapperNotInitializedError(MapperError):
    """A lookup was attempted before initialize()."""


def _clean_number(value) -> Optional[float]:
    """Convert a dataset cell to a float, None for blanks and non-finite values."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not np.isfinite(number):
        return None
    return number


class IndustryMapper:
    """
    Maps ticker symbols to their industry classification.
    Call initialize() once before any lookup.
    """

    def __init__(self, csv_path: str = None, data_url: str = None):
        """
        Args:
            csv_path: Path to the industry CSV (default: industry_data.csv next to this file)
            data_url: Optional URL of a remote CSV tried before the local file
        """
        self.csv_path = Path(csv_path) if csv_path else INDUSTRY_DATA_FILE
        self.data_url = data_url if data_url is not None else INDUSTRY_DATA_URL

        self.impersonate_ver = "chrome120"
        self.headers = {
            'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36',
            'Accept': 'text/csv,text/plain,*/*;q=0.8',
        }

        self.df = None
        self.symbol_to_info: Dict[str, Dict] = {}
        self.industry_to_symbols: Dict[str, List[str]] = {}
        self.last_updated = None
        self._init_lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self.df is not None

    def initialize(self):
        """Load the dataset and build lookup indices. Safe to call twice."""
        if self.is_initialized:
            return

        with self._init_lock:
            if self.is_initialized:
                return

            df = None
            if self.data_url:
                df = self._load_remote()
            if df is None:
                df = self._load_local()

            df = self._clean(df)
            self._build_indices(df)
            self.df = df
            logger.info(f"Industry mapper ready: {len(self.symbol_to_info)} symbols, "
                        f"{len(self.industry_to_symbols)} industries")

    def _load_remote(self) -> Optional[pd.DataFrame]:
        """Fetch the dataset from data_url. Returns None on any failure."""
        try:
            if USE_CFFI:
                response = cffi_requests.get(
                    self.data_url,
                    headers=self.headers,
                    impersonate=self.impersonate_ver,
                    timeout=10
                )
            else:
                response = cffi_requests.get(self.data_url, headers=self.headers, timeout=10)

            if response.status_code != 200:
                logger.warning(f"Remote dataset returned {response.status_code}: {self.data_url}")
                return None

            self.last_updated = datetime.now().isoformat()
            return pd.read_csv(io.StringIO(response.text))

        except Exception as e:
            logger.warning(f"Could not fetch remote dataset {self.data_url}: {e}")
            return None

    def _load_local(self) -> pd.DataFrame:
        """Load the dataset from csv_path."""
        if not self.csv_path.exists():
            raise DataLoadError(f"Industry data not found: {self.csv_path}")

        try:
            df = pd.read_csv(self.csv_path)
        except Exception as e:
            raise DataLoadError(f"Error reading {self.csv_path}: {e}") from e

        self.last_updated = datetime.fromtimestamp(self.csv_path.stat().st_mtime).isoformat()
        logger.info(f"Loaded {len(df)} rows from {self.csv_path.name}")
        return df

    def _clean(self, df: pd.DataFrame) -> pd.DataFrame:
        df.columns = df.columns.str.strip()

        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise DataLoadError(f"Industry data is missing columns: {', '.join(missing)}")

        for column in FUNDAMENTAL_COLUMNS:
            if column not in df.columns:
                df[column] = np.nan

        df['Symbol'] = df['Symbol'].fillna('').astype(str).str.strip().str.upper()
        df = df[df['Symbol'] != ''].copy()

        df['Name'] = df['Name'].fillna('').astype(str).str.strip()
        df['Exchange'] = df['Exchange'].fillna('').astype(str).str.strip().str.upper()
        df['Sector'] = df['Sector'].fillna('Unknown').astype(str).str.strip()
        df['Industry'] = df['Industry'].fillna('Unknown').astype(str).str.strip()
        df.loc[df['Industry'] == '', 'Industry'] = 'Unknown'
        df.loc[df['Sector'] == '', 'Sector'] = 'Unknown'

        duplicates = df['Symbol'].duplicated()
        if duplicates.any():
            logger.warning(f"Dropping {int(duplicates.sum())} duplicate symbols")
            df = df[~duplicates].copy()

        return df.reset_index(drop=True)

    def _build_indices(self, df: pd.DataFrame):
        """Build lookup indices for fast access."""
        self.symbol_to_info = {}
        self.industry_to_symbols = {}

        for _, row in df.iterrows():
            info = {
                'symbol': row['Symbol'],
                'name': row['Name'],
                'exchange': row['Exchange'],
                'sector': row['Sector'],
                'industry': row['Industry'],
            }
            for column, key in FUNDAMENTAL_COLUMNS.items():
                info[key] = _clean_number(row[column])

            self.symbol_to_info[info['symbol']] = info
            self.industry_to_symbols.setdefault(info['industry'], []).append(info['symbol'])

    def _require_initialized(self):
        if not self.is_initialized:
            raise MapperNotInitializedError("IndustryMapper.initialize() has not been called")

    def get_stats(self) -> Dict:
        """Get summary statistics for the loaded dataset."""
        self._require_initialized()
        return {
            'total_symbols': len(self.symbol_to_info),
            'total_industries': len(self.industry_to_symbols),
            'total_sectors': int(self.df['Sector'].nunique()),
            'last_updated': self.last_updated,
        }

    def get_available_industries(self) -> List[str]:
        self._require_initialized()
        return sorted(self.industry_to_symbols)

    def get_available_symbols(self) -> List[str]:
        self._require_initialized()
        return sorted(self.symbol_to_info)

    def get_symbols_by_industry(self, industry: str) -> List[str]:
        """Get all symbols in one industry (case-insensitive exact match)."""
        self._require_initialized()
        wanted = industry.strip().lower()
        for name, symbols in self.industry_to_symbols.items():
            if name.lower() == wanted:
                return sorted(symbols)
        return []

    def get_symbol_info(self, symbol: str) -> Optional[Dict]:
        """Get full info (fundamentals included) for one symbol."""
        self._require_initialized()
        info = self.symbol_to_info.get(symbol.strip().upper())
        return dict(info) if info else None

    def _to_stock_data(self, info: Dict, show_fundamentals: bool) -> Dict:
        stock = {
            'symbol': info['symbol'],
            'name': info['name'],
            'exchange': info['exchange'],
            'sector': info['sector'],
            'industry': info['industry'],
        }
        if show_fundamentals:
            for key in FUNDAMENTAL_COLUMNS.values():
                stock[key] = info[key]
        return stock

    def process_symbols(self, symbols: List[str], show_fundamentals: bool = False) -> Dict:
        """
        Map a batch of symbols to industries.

        Args:
            symbols: Raw symbols as typed by the user
            show_fundamentals: Include market cap, P/E, EPS and dividend yield

        Returns:
            Dict with 'mapped_symbols', 'invalid_symbols', 'tv_formatted_output'
            and 'flat_output' keys
        """
        self._require_initialized()

        seen = set()
        found = []
        invalid = []

        for raw in symbols:
            symbol = str(raw).strip().upper()
            if not symbol or symbol in seen:
                continue
            seen.add(symbol)

            info = self.symbol_to_info.get(symbol)
            if info:
                found.append(info)
            else:
                invalid.append(symbol)

        # Stable sort keeps input order within an industry
        found.sort(key=lambda info: info['industry'])
        mapped = [self._to_stock_data(info, show_fundamentals) for info in found]

        logger.info(f"Processed {len(seen)} symbols: {len(mapped)} mapped, {len(invalid)} invalid")

        return {
            'mapped_symbols': mapped,
            'invalid_symbols': invalid,
            'tv_formatted_output': format_tradingview(mapped),
            'flat_output': format_flat(mapped),
        }


def format_tradingview(stocks: List[Dict]) -> str:
    """
    Build a TradingView watchlist import string.
    Each industry starts a '###Industry' section followed by EXCHANGE:SYMBOL entries.
    """
    parts = []
    current_industry = None

    for stock in stocks:
        if stock['industry'] != current_industry:
            current_industry = stock['industry']
            parts.append(f"###{current_industry}")
        if stock.get('exchange'):
            parts.append(f"{stock['exchange']}:{stock['symbol']}")
        else:
            parts.append(stock['symbol'])

    return ','.join(parts)


def format_flat(stocks: List[Dict]) -> str:
    return ','.join(stock['symbol'] for stock in stocks)


# Singleton instance for easy import
_mapper_instance = None

def get_industry_mapper() -> IndustryMapper:
    """Get singleton IndustryMapper instance."""
    global _mapper_instance
    if _mapper_instance is None:
        _mapper_instance = IndustryMapper()
    return _mapper_instance


if __name__ == "__main__":
    print("Testing Industry Mapper...")
    print("=" * 50)

    mapper = IndustryMapper()
    mapper.initialize()
    stats = mapper.get_stats()

    print(f"Total Symbols: {stats['total_symbols']}")
    print(f"Industries: {stats['total_industries']}")
    print(f"Sectors: {stats['total_sectors']}")

    result = mapper.process_symbols(['AAPL', 'MSFT', 'NVDA', 'XOM', 'NOTREAL'])
    print(f"\nTradingView: {result['tv_formatted_output']}")
    print(f"Flat: {result['flat_output']}")
    print(f"Invalid: {result['invalid_symbols']}")
