"""
Watchlist Store
===============
Keeps the user's watchlist of symbols and persists it to a JSON file.
In serverless mode the list lives in memory only.
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(message)s')
logger = logging.getLogger(__name__)

IS_SERVERLESS = os.environ.get('VERCEL', '') == '1'


class WatchlistStore:
    """
    Ordered, de-duplicated list of upper-case symbols.
    """

    def __init__(self, watchlist_file: str = None, persist: bool = None):
        """
        Initialize the watchlist store.

        Args:
            watchlist_file: Path to JSON file (default: watchlist.json, or $WATCHLIST_FILE)
            persist: Write changes to disk (default: True unless running serverless)
        """
        base_path = Path(__file__).parent
        default_file = os.environ.get('WATCHLIST_FILE', base_path / "watchlist.json")
        self.watchlist_file = Path(watchlist_file) if watchlist_file else Path(default_file)
        self.persist = (not IS_SERVERLESS) if persist is None else persist

        self.state = self._load_state()

    def _empty_state(self) -> Dict:
        return {'symbols': [], 'updated_at': None}

    def _load_state(self) -> Dict:
        """Load watchlist from JSON file."""
        if not self.persist or not self.watchlist_file.exists():
            return self._empty_state()

        try:
            with open(self.watchlist_file, 'r') as f:
                state = json.load(f)
            if not isinstance(state.get('symbols'), list):
                raise ValueError("'symbols' must be a list")
            return state
        except Exception as e:
            logger.error(f"Error loading watchlist: {e}")
            return self._empty_state()

    def _save_state(self):
        """Save watchlist to JSON file."""
        self.state['updated_at'] = datetime.now().isoformat()
        if not self.persist:
            return
        try:
            with open(self.watchlist_file, 'w') as f:
                json.dump(self.state, f, indent=2)
        except Exception as e:
            logger.error(f"Error saving watchlist: {e}")

    @property
    def watchlist(self) -> List[str]:
        return list(self.state['symbols'])

    def add_to_watchlist(self, symbols: Iterable[str]) -> int:
        """
        Add symbols, skipping ones already present.

        Returns:
            Number of symbols actually added
        """
        current = self.state['symbols']
        known = set(current)
        added = 0

        for raw in symbols:
            symbol = str(raw).strip().upper()
            if not symbol or symbol in known:
                continue
            current.append(symbol)
            known.add(symbol)
            added += 1

        if added:
            self._save_state()
            logger.info(f"Added {added} symbols to watchlist ({len(current)} total)")
        return added

    def remove_from_watchlist(self, symbol: str) -> bool:
        symbol_upper = symbol.strip().upper()
        if symbol_upper not in self.state['symbols']:
            return False

        self.state['symbols'].remove(symbol_upper)
        self._save_state()
        logger.info(f"Removed {symbol_upper} from watchlist")
        return True

    def clear_watchlist(self):
        self.state = self._empty_state()
        self._save_state()
        logger.info("Cleared watchlist")


# Singleton instance
_store_instance = None

def get_watchlist_store() -> WatchlistStore:
    """Get singleton WatchlistStore instance."""
    global _store_instance
    if _store_instance is None:
        _store_instance = WatchlistStore()
    return _store_instance
