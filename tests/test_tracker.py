import threading

import pytest

from tabreaper.adapters import InMemoryTabProvider
from tabreaper.clock import DAY_MS, MINUTE_MS
from tabreaper.engine import ReaperEngine
from tabreaper.errors import StoreError
from tabreaper.spi.tab_provider import Tab
from tabreaper.stores import InMemoryStore
from tabreaper.tracker import EventBus, TabActivated, TabCreated, TabRemoved, Tracker

T0 = 1_700_000_000_000


def _setup(timestamps=None):
    now = [T0]
    provider = InMemoryTabProvider()
    store = InMemoryStore(timestamps=timestamps)
    engine = ReaperEngine(store, provider, clock=lambda: now[0])
    tracker = Tracker(engine)
    bus = EventBus(tracker.handle)
    provider.subscribe(bus.publish)
    return now, provider, store, tracker, bus


def test_created_tab_gets_timestamp():
    now, provider, store, _, bus = _setup()
    tab = provider.open_tab("https://a")
    bus.drain()
    assert store.load().timestamps == {tab.id: T0}


def test_removed_tab_loses_timestamp():
    now, provider, store, _, bus = _setup()
    tab = provider.open_tab("https://a")
    provider.remove_tab(tab.id)
    assert bus.drain() == 2
    assert store.load().timestamps == {}


def test_activation_refreshes_siblings_only():
    now, provider, store, tracker, bus = _setup()
    a = provider.open_tab("https://same", window=1)
    b = provider.open_tab("https://same", window=2)
    c = provider.open_tab("https://other", window=2)
    bus.drain()

    now[0] += 3 * DAY_MS
    refreshed = tracker.on_activated(a.id)

    assert refreshed == [a.id, b.id]
    assert store.load().timestamps == {a.id: now[0], b.id: now[0], c.id: T0}


def test_activation_of_unknown_tab_still_stamps_it():
    now, provider, store, tracker, _ = _setup()
    assert tracker.on_activated(404) == [404]
    assert store.load().timestamps == {404: T0}


def test_activation_without_url_does_not_group():
    now, provider, store, tracker, bus = _setup()
    a = provider.open_tab(None)
    b = provider.open_tab(None)
    bus.drain()
    now[0] += MINUTE_MS
    tracker.on_activated(a.id)
    assert store.load().timestamps == {a.id: T0 + MINUTE_MS, b.id: T0}


def test_activation_then_removal_order_is_kept():
    now, provider, store, _, bus = _setup()
    tab = provider.open_tab("https://a")
    provider.activate(tab.id)
    provider.remove_tab(tab.id)
    assert bus.pending() == 3
    bus.drain()
    assert store.load().timestamps == {}


def test_handle_rejects_unknown_event():
    _, _, _, tracker, _ = _setup()
    with pytest.raises(TypeError):
        tracker.handle("created")


def test_handlers_do_not_lose_updates_across_threads():
    now, provider, store, tracker, _ = _setup()
    tabs = [Tab(id=i, url=f"https://t{i}") for i in range(1, 41)]
    threads = [threading.Thread(target=tracker.on_created, args=(tab,)) for tab in tabs]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(5)
    assert set(store.load().timestamps) == {tab.id for tab in tabs}


class _BrokenStore(InMemoryStore):
    def save_timestamps(self, timestamps):
        raise StoreError("read-only")


def test_bus_logs_store_failure_and_keeps_going():
    provider = InMemoryTabProvider()
    engine = ReaperEngine(_BrokenStore(), provider, clock=lambda: T0)
    handled = []
    tracker = Tracker(engine)

    def handler(event):
        handled.append(event)
        tracker.handle(event)

    bus = EventBus(handler)
    bus.publish(TabCreated(Tab(id=1, url="https://a")))
    bus.publish(TabRemoved(1))
    assert bus.drain() == 2
    assert len(handled) == 2


def test_worker_thread_dispatches_in_order():
    seen = []
    done = threading.Event()

    def handler(event):
        seen.append(event)
        if len(seen) == 3:
            done.set()

    bus = EventBus(handler)
    bus.start()
    try:
        bus.publish(TabCreated(Tab(id=1, url="https://a")))
        bus.publish(TabActivated(1))
        bus.publish(TabRemoved(1))
        assert done.wait(5)
    finally:
        bus.stop()
    assert [type(e) for e in seen] == [TabCreated, TabActivated, TabRemoved]


class _UnreachableProvider(InMemoryTabProvider):
    def query_tabs(self):
        raise ConnectionError("host unreachable")


def test_activation_stamps_tab_when_sibling_lookup_fails():
    engine = ReaperEngine(InMemoryStore(timestamps={1: 0}), _UnreachableProvider(), clock=lambda: T0)
    bus = EventBus(Tracker(engine).handle, lock=engine.lock)
    bus.publish(TabActivated(1))
    bus.publish(TabCreated(Tab(id=2, url="https://b")))

    assert bus.drain() == 2
    assert bus.pending() == 0
    assert engine.timestamps() == {1: T0, 2: T0}


def test_failing_handler_does_not_strand_later_events():
    seen = []

    def handler(event):
        if isinstance(event, TabActivated):
            raise ValueError("bad event")
        seen.append(event)

    bus = EventBus(handler)
    bus.publish(TabActivated(1))
    bus.publish(TabRemoved(1))
    assert bus.drain() == 2
    assert seen == [TabRemoved(1)]


def test_stop_keeps_busy_worker_and_dispatches_leftovers():
    seen = []
    entered = threading.Event()
    gate = threading.Event()

    def handler(event):
        entered.set()
        gate.wait(5)
        seen.append(event)

    bus = EventBus(handler)
    bus.publish(TabCreated(Tab(id=1, url="https://a")))
    bus.publish(TabActivated(1))
    bus.publish(TabRemoved(1))
    bus.start()
    assert entered.wait(5)

    assert bus.stop(timeout=0.05) is False
    assert bus.pending() == 2

    gate.set()
    assert bus.stop(timeout=5) is True
    assert bus.pending() == 0
    assert [type(e) for e in seen] == [TabCreated, TabActivated, TabRemoved]
