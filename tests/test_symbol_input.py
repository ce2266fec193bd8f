"""Tests for symbol list parsing and the autocomplete widget state."""

import pytest

from symbol_input import (
    MAX_SYMBOLS,
    EmptySymbolListError,
    SymbolAutocomplete,
    TooManySymbolsError,
    filter_symbols,
    parse_symbol_list,
    validate_symbol_list,
)


SYMBOLS = ['AAPL', 'AMD', 'AMZN', 'MSFT', 'NVDA', 'XOM']


# =====================================================================
# PARSING
# =====================================================================

class TestParseSymbolList:
    def test_commas_and_newlines(self):
        assert parse_symbol_list("AAPL,MSFT\nNVDA\r\nXOM") == ['AAPL', 'MSFT', 'NVDA', 'XOM']

    def test_trims_and_drops_empties(self):
        assert parse_symbol_list("  aapl , ,\n\n msft ,") == ['aapl', 'msft']

    def test_empty_text(self):
        assert parse_symbol_list("") == []
        assert parse_symbol_list(" ,\n, ") == []


class TestValidateSymbolList:
    def test_limit_is_inclusive(self):
        validate_symbol_list(['A'] * MAX_SYMBOLS)

    def test_too_many(self):
        with pytest.raises(TooManySymbolsError, match="Maximum limit is 999"):
            validate_symbol_list(['A'] * (MAX_SYMBOLS + 1))

    def test_empty(self):
        with pytest.raises(EmptySymbolListError, match="at least one valid symbol"):
            validate_symbol_list([])


# =====================================================================
# FILTERING
# =====================================================================

class TestFilterSymbols:
    def test_uppercases_query_and_matches_substring(self):
        assert filter_symbols(SYMBOLS, 'am') == ['AMD', 'AMZN']
        assert filter_symbols(SYMBOLS, 'a') == ['AAPL', 'AMD', 'AMZN', 'NVDA']

    def test_capped_at_ten(self):
        many = [f"A{i:02d}" for i in range(25)]
        assert len(filter_symbols(many, 'A')) == 10
        assert filter_symbols(many, 'A') == many[:10]

    def test_empty_query(self):
        assert filter_symbols(SYMBOLS, '') == []

    def test_non_list_symbols(self):
        assert filter_symbols(None, 'A') == []

    def test_exclude_is_case_insensitive(self):
        assert filter_symbols(SYMBOLS, 'a', exclude=['amd']) == ['AAPL', 'AMZN', 'NVDA']


# =====================================================================
# AUTOCOMPLETE
# =====================================================================

@pytest.fixture
def selected():
    return []


@pytest.fixture
def widget(selected):
    w = SymbolAutocomplete(SYMBOLS, on_select=selected.append)
    w.set_anchor({'left': 20, 'bottom': 100, 'width': 240}, scroll_x=5, scroll_y=300)
    return w


class TestSymbolAutocomplete:
    def test_typing_opens_dropdown_under_input(self, widget):
        widget.set_input('nv')
        assert widget.filtered_symbols == ['NVDA']
        assert widget.is_open
        assert widget.dropdown_position == {'top': 400, 'left': 25, 'width': 240}

    def test_no_matches_keeps_closed(self, widget):
        widget.set_input('zzz')
        assert widget.filtered_symbols == []
        assert not widget.is_open

    def test_clearing_input_closes(self, widget):
        widget.set_input('a')
        widget.set_input('')
        assert widget.filtered_symbols == []
        assert not widget.is_open

    def test_click_outside_closes(self, widget):
        widget.set_input('a')
        widget.click(inside_wrapper=False, inside_dropdown=False)
        assert not widget.is_open
        # suggestions are kept so focus can reopen
        widget.focus()
        assert widget.is_open

    def test_click_inside_dropdown_keeps_open(self, widget):
        widget.set_input('a')
        widget.click(inside_wrapper=False, inside_dropdown=True)
        assert widget.is_open
        widget.click(inside_wrapper=True)
        assert widget.is_open

    def test_select_reports_and_resets(self, widget, selected):
        widget.set_input('ms')
        widget.select('MSFT')
        assert selected == ['MSFT']
        assert widget.input_value == ''
        assert not widget.is_open
        assert widget.view()['filtered_symbols'] == []

    def test_add_typed_uppercases(self, widget, selected):
        widget.set_input('brk.b')
        assert widget.can_add
        widget.add_typed()
        assert selected == ['BRK.B']
        assert widget.input_value == ''

    def test_add_disabled(self, selected):
        w = SymbolAutocomplete(SYMBOLS, on_select=selected.append, is_disabled=True)
        w.set_input('AAPL')
        assert not w.can_add
        w.add_typed()
        assert selected == []

    def test_add_with_empty_input_does_nothing(self, widget, selected):
        widget.add_typed()
        assert selected == []

    def test_focus_repositions_after_scroll(self, widget):
        widget.set_input('x')
        widget.click(inside_wrapper=False)
        widget.set_anchor({'left': 20, 'bottom': 100, 'width': 240}, scroll_y=0)
        widget.focus()
        assert widget.dropdown_position['top'] == 100

    def test_symbols_update_refilters(self, widget):
        widget.set_input('tsl')
        assert not widget.is_open
        widget.set_symbols(SYMBOLS + ['TSLA'])
        assert widget.filtered_symbols == ['TSLA']
        assert widget.is_open

    def test_skips_symbols_already_selected(self, selected):
        w = SymbolAutocomplete(SYMBOLS, on_select=selected.append, selected_symbols=['aapl', 'AMZN'])
        w.set_input('a')
        assert w.filtered_symbols == ['AMD', 'NVDA']

    def test_selected_symbol_not_suggested_again(self, widget, selected):
        widget.set_input('am')
        assert widget.filtered_symbols == ['AMD', 'AMZN']
        widget.select('AMD')
        assert widget.selected_symbols == ['AMD']

        widget.set_input('am')
        assert widget.filtered_symbols == ['AMZN']

    def test_set_selected_refilters(self, widget):
        widget.set_input('ms')
        assert widget.is_open
        widget.set_selected(['MSFT'])
        assert widget.filtered_symbols == []
        assert not widget.is_open
