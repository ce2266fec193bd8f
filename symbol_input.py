"""
Symbol Input
============
Parsing of pasted symbol lists and the view-state of the symbol autocomplete
widget (filtering, dropdown placement, click-outside and selection).
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(message)s')
logger = logging.getLogger(__name__)

MAX_SYMBOLS = 999
MAX_SUGGESTIONS = 10


class SymbolListError(ValueError):
    """A submitted symbol list cannot be processed."""


class TooManySymbolsError(SymbolListError):
    def __init__(self, count: int, limit: int = MAX_SYMBOLS):
        self.count = count
        self.limit = limit
        super().__init__(f"Too many symbols. Maximum limit is {limit} symbols at once.")


class EmptySymbolListError(SymbolListError):
    def __init__(self):
        super().__init__("Please enter at least one valid symbol")


def parse_symbol_list(text: str) -> List[str]:
    """
    Split pasted text into symbols.
    Newlines count as commas; whitespace is trimmed and empty entries dropped.
    """
    if not text:
        return []
    return [s.strip() for s in text.replace('\r\n', '\n').replace('\n', ',').split(',') if s.strip()]


def validate_symbol_list(symbols: Sequence[str], limit: int = MAX_SYMBOLS):
    if len(symbols) > limit:
        raise TooManySymbolsError(len(symbols), limit)
    if not symbols:
        raise EmptySymbolListError()


def filter_symbols(symbols, query: str, limit: int = MAX_SUGGESTIONS, exclude: Sequence[str] = ()) -> List[str]:
    """
    Symbols containing the upper-cased query, in list order, at most `limit`.
    Symbols in `exclude` (compared upper-case) are skipped.
    """
    if not query:
        return []
    if not isinstance(symbols, (list, tuple)):
        return []

    needle = query.upper()
    skip = {s.upper() for s in exclude}
    matches = []
    for symbol in symbols:
        if needle in symbol and symbol.upper() not in skip:
            matches.append(symbol)
            if len(matches) >= limit:
                break
    return matches


class SymbolAutocomplete:
    """
    State of one autocomplete input.

    The input's bounding rect is reported through set_anchor(); the dropdown is
    positioned directly under it in page coordinates.
    """

    def __init__(
        self,
        symbols: List[str],
        on_select: Callable[[str], None],
        selected_symbols: Sequence[str] = (),
        is_disabled: bool = False
    ):
        self.symbols = symbols
        self.on_select = on_select
        self.selected_symbols = list(selected_symbols)
        self.is_disabled = is_disabled

        self.input_value = ""
        self.filtered_symbols: List[str] = []
        self.is_open = False
        self.dropdown_position = {'top': 0, 'left': 0, 'width': 0}

        self._anchor: Optional[Dict] = None
        self._scroll = (0, 0)

    @property
    def can_add(self) -> bool:
        return bool(self.input_value) and not self.is_disabled

    def set_symbols(self, symbols: List[str]):
        self.symbols = symbols
        self._refilter()

    def set_anchor(self, rect: Dict, scroll_x: float = 0, scroll_y: float = 0):
        """
        Record where the input sits on screen.

        Args:
            rect: Bounding rect with 'left', 'bottom' and 'width' keys
            scroll_x: Horizontal page scroll offset
            scroll_y: Vertical page scroll offset
        """
        self._anchor = dict(rect)
        self._scroll = (scroll_x, scroll_y)
        if self.is_open:
            self._update_position()

    def _update_position(self):
        if self._anchor is None:
            return
        scroll_x, scroll_y = self._scroll
        self.dropdown_position = {
            'top': self._anchor['bottom'] + scroll_y,
            'left': self._anchor['left'] + scroll_x,
            'width': self._anchor['width'],
        }

    def _refilter(self):
        if len(self.input_value) < 1:
            self.filtered_symbols = []
            self.is_open = False
            return

        self.filtered_symbols = filter_symbols(self.symbols, self.input_value, exclude=self.selected_symbols)
        self.is_open = len(self.filtered_symbols) > 0
        if self.is_open:
            self._update_position()

    def set_input(self, value: str):
        self.input_value = value
        self._refilter()

    def focus(self):
        if self.filtered_symbols:
            self.is_open = True
            self._update_position()

    def click(self, inside_wrapper: bool, inside_dropdown: bool = False):
        """Handle a mouse-down anywhere on the page."""
        if inside_wrapper or inside_dropdown:
            return
        self.is_open = False

    def set_selected(self, selected_symbols: Sequence[str]):
        self.selected_symbols = list(selected_symbols)
        self._refilter()

    def select(self, symbol: str):
        self.on_select(symbol)
        if symbol.upper() not in (s.upper() for s in self.selected_symbols):
            self.selected_symbols.append(symbol.upper())
        self.input_value = ""
        self.filtered_symbols = []
        self.is_open = False

    def add_typed(self):
        """Select whatever is typed, as entered by the '+' button."""
        if not self.can_add:
            return
        logger.debug(f"Adding typed symbol {self.input_value.upper()}")
        self.select(self.input_value.upper())

    def view(self) -> Dict:
        return {
            'input_value': self.input_value,
            'filtered_symbols': list(self.filtered_symbols),
            'is_open': self.is_open and len(self.filtered_symbols) > 0,
            'dropdown_position': dict(self.dropdown_position),
            'can_add': self.can_add,
        }
