"""Tests for watchlist persistence and the toast queue."""

import json

from notifications import ToastQueue
from watchlist_store import WatchlistStore


class TestWatchlistStore:
    def test_add_normalizes_and_dedupes(self, watchlist):
        added = watchlist.add_to_watchlist([' aapl', 'MSFT', 'AAPL', ''])
        assert added == 2
        assert watchlist.watchlist == ['AAPL', 'MSFT']
        assert watchlist.add_to_watchlist(['msft']) == 0

    def test_persists_between_instances(self, tmp_path):
        path = tmp_path / "wl.json"
        WatchlistStore(watchlist_file=str(path), persist=True).add_to_watchlist(['NVDA', 'AMD'])

        reloaded = WatchlistStore(watchlist_file=str(path), persist=True)
        assert reloaded.watchlist == ['NVDA', 'AMD']
        assert json.loads(path.read_text())['updated_at'] is not None

    def test_remove(self, watchlist):
        watchlist.add_to_watchlist(['AAPL', 'MSFT'])
        assert watchlist.remove_from_watchlist('aapl')
        assert not watchlist.remove_from_watchlist('AAPL')
        assert watchlist.watchlist == ['MSFT']

    def test_clear(self, watchlist):
        watchlist.add_to_watchlist(['AAPL'])
        watchlist.clear_watchlist()
        assert watchlist.watchlist == []

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "wl.json"
        path.write_text("{not json")
        assert WatchlistStore(watchlist_file=str(path), persist=True).watchlist == []

    def test_memory_only_does_not_write(self, tmp_path):
        path = tmp_path / "wl.json"
        store = WatchlistStore(watchlist_file=str(path), persist=False)
        store.add_to_watchlist(['AAPL'])
        assert store.watchlist == ['AAPL']
        assert not path.exists()

    def test_returned_list_is_a_copy(self, watchlist):
        watchlist.add_to_watchlist(['AAPL'])
        watchlist.watchlist.append('HACK')
        assert watchlist.watchlist == ['AAPL']


class TestToastQueue:
    def test_defaults(self):
        toasts = ToastQueue()
        toasts.push('success', 'saved')
        toasts.success('done')
        toasts.error('failed')

        kinds = [(t['kind'], t['duration'], t['position']) for t in toasts.pending]
        assert kinds == [('success', 2000, 'top-right'),
                         ('success', 3000, 'top-right'),
                         ('error', 5000, 'top-right')]

    def test_drain_empties_queue(self):
        toasts = ToastQueue()
        toasts.error('x', duration=1000)
        drained = toasts.drain()
        assert len(drained) == 1
        assert drained[0]['duration'] == 1000
        assert toasts.pending == []
