"""
Home Page Controller
====================
Holds the state behind the dashboard page: mapper initialization under a
safety timeout, symbol submission, results, watchlist additions and the
responsive section layout. Every failure ends up as a toast.
"""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from industry_mapper import IndustryMapper
from notifications import ToastQueue
from symbol_input import (
    MAX_SYMBOLS, EmptySymbolListError, TooManySymbolsError,
    parse_symbol_list, validate_symbol_list,
)
from watchlist_store import WatchlistStore

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(message)s')
logger = logging.getLogger(__name__)

INIT_TIMEOUT_SECONDS = 15.0
MOBILE_BREAKPOINT = 768


class HomePage:
    """
    State of the single dashboard page.
    """

    def __init__(
        self,
        mapper_factory: Callable[[], IndustryMapper],
        watchlist: WatchlistStore,
        toasts: ToastQueue = None,
        init_timeout: float = INIT_TIMEOUT_SECONDS
    ):
        self.mapper_factory = mapper_factory
        self.watchlist = watchlist
        self.toasts = toasts or ToastQueue()
        self.init_timeout = init_timeout

        self.mapper: Optional[IndustryMapper] = None
        self.is_initializing = True
        self.is_loading = False
        self.stats: Optional[Dict] = None
        self.industries: List[str] = []
        self.available_symbols: List[str] = []
        self.mapped_symbols: List[Dict] = []
        self.invalid_symbols: List[str] = []
        self.tv_formatted_output = ""
        self.flat_output = ""
        self.show_fundamentals = False
        self.show_instructions = False

        self._lock = threading.Lock()
        self._init_thread: Optional[threading.Thread] = None
        self._init_started = 0.0

    # ==================== INITIALIZATION ====================
    def initialize(self):
        """
        Initialize the mapper in a worker thread and wait up to init_timeout.
        Concurrent callers wait on the same attempt; a finished attempt that
        left no mapper is retried. A late finish still fills in the state.
        """
        with self._lock:
            worker = self._init_thread
            if worker is not None and not worker.is_alive() and self.mapper is None:
                logger.info("Retrying mapper initialization")
                worker = None

            if worker is None:
                self.is_initializing = True
                self._init_started = time.time()
                worker = threading.Thread(target=self._initialize_mapper, daemon=True)
                self._init_thread = worker
                worker.start()

        remaining = self.init_timeout - (time.time() - self._init_started)
        worker.join(max(remaining, 0))

        if worker.is_alive():
            with self._lock:
                if self.is_initializing:
                    logger.warning(f"Safety timeout triggered after {self.init_timeout} seconds")
                    self.is_initializing = False
                    self.toasts.error("Loading took too long. Please refresh the page.", duration=5000)

    def _initialize_mapper(self):
        start_time = time.time()
        logger.info("Starting mapper initialization...")
        try:
            mapper = self.mapper_factory()
            mapper.initialize()

            with self._lock:
                self.mapper = mapper
                self.stats = mapper.get_stats()

            try:
                industries = mapper.get_available_industries()
                symbols = mapper.get_available_symbols()

                with self._lock:
                    logger.info(f"Loaded {len(industries)} industries and {len(symbols)} symbols")
                    self.industries = industries
                    self.available_symbols = symbols
                    self.is_initializing = False

            except Exception as e:
                logger.error(f"Error loading industries or symbols: {e}")
                with self._lock:
                    self.is_initializing = False
                    self.toasts.error("Some data could not be loaded completely", duration=3000)

        except Exception as e:
            logger.error(f"Failed to initialize mapper: {e}")
            with self._lock:
                self.toasts.error("Failed to load data. Please refresh the page.", duration=5000)
                self.is_initializing = False

        finally:
            logger.info(f"Initialization completed in {time.time() - start_time:.2f}s")

    # ==================== ACTIONS ====================
    def handle_submit(self, text: str, show_fundamentals: bool = False) -> bool:
        """
        Process a pasted symbol list.

        Returns:
            True when the mapper processed the list
        """
        if self.mapper is None:
            return False

        symbols = parse_symbol_list(text)
        try:
            validate_symbol_list(symbols, MAX_SYMBOLS)
        except TooManySymbolsError as e:
            self.toasts.error(str(e), duration=5000)
            return False
        except EmptySymbolListError as e:
            self.toasts.error(str(e), duration=2000)
            return False

        self.is_loading = True
        self.show_fundamentals = show_fundamentals

        try:
            result = self.mapper.process_symbols(symbols, show_fundamentals)

            self.mapped_symbols = result['mapped_symbols']
            self.invalid_symbols = result['invalid_symbols']
            self.tv_formatted_output = result['tv_formatted_output']
            self.flat_output = result['flat_output']

            if self.invalid_symbols:
                message = (f"Processed {len(self.mapped_symbols)} symbols "
                           f"({len(self.invalid_symbols)} invalid)")
            else:
                message = f"Successfully processed all {len(self.mapped_symbols)} symbols"
            self.toasts.success(message, duration=3000)
            return True

        except Exception as e:
            logger.error(f"Error processing symbols: {e}")
            self.toasts.error("Error processing symbols. Please try again.")
            return False

        finally:
            self.is_loading = False

    def add_to_watchlist(self, symbols: List[str]) -> int:
        added = self.watchlist.add_to_watchlist(symbols)
        self.toasts.success(f"Added {len(symbols)} symbols to watchlist")
        return added

    def toggle_instructions(self, show: bool = None):
        self.show_instructions = (not self.show_instructions) if show is None else show

    # ==================== VIEW ====================
    def _instruction_sections(self) -> List[str]:
        return ['instructions'] if self.show_instructions else ['show_instructions_button']

    def layout(self, viewport_width: int) -> Dict:
        """
        Ordered sections visible at a viewport width.
        Mobile stacks everything in one column; desktop splits main and side columns.
        """
        if self.is_initializing:
            return {'mode': 'loading', 'sections': ['loading_indicator']}

        has_results = len(self.mapped_symbols) > 0
        has_industries = len(self.industries) > 0
        has_watchlist = len(self.watchlist.watchlist) > 0

        if viewport_width < MOBILE_BREAKPOINT:
            sections = self._instruction_sections()
            if self.stats:
                sections.append('stats')
            sections.append('symbol_form')
            if has_results:
                sections.append('results')
            if has_industries:
                sections.append('industries')
            if has_watchlist:
                sections.append('watchlist')
            return {'mode': 'mobile', 'sections': sections}

        main = self._instruction_sections() + ['symbol_form']
        if has_results:
            main.append('results')

        side = []
        if self.stats:
            side.append('stats')
        if has_watchlist:
            side.append('watchlist')
        if has_industries:
            side.append('industries')

        return {'mode': 'desktop', 'main': main, 'side': side}

    def snapshot(self) -> Dict:
        return {
            'is_initializing': self.is_initializing,
            'is_loading': self.is_loading,
            'stats': self.stats,
            'industries': list(self.industries),
            'available_symbols': list(self.available_symbols),
            'mapped_symbols': list(self.mapped_symbols),
            'invalid_symbols': list(self.invalid_symbols),
            'tv_formatted_output': self.tv_formatted_output,
            'flat_output': self.flat_output,
            'show_fundamentals': self.show_fundamentals,
            'show_instructions': self.show_instructions,
            'watchlist': self.watchlist.watchlist,
        }
