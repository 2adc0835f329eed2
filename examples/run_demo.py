from tabreaper.adapters import InMemoryTabProvider, ManualScheduler, RecordingBadge
from tabreaper.clock import DAY_MS, HOUR_MS
from tabreaper.config import configure_logging, load_config
from tabreaper.service import TabReaper
from tabreaper.stores import InMemoryStore


def main() -> None:
    config = load_config()
    configure_logging(config.log_level)
    now = [1_700_000_000_000]
    provider = InMemoryTabProvider()
    scheduler = ManualScheduler()
    badge = RecordingBadge()
    reaper = TabReaper(InMemoryStore(), provider, scheduler, badge, config=config, clock=lambda: now[0])
    provider.subscribe(reaper.events.publish)

    docs = provider.open_tab("https://docs.python.org/3/", title="Python docs", window=1, active=True)
    provider.open_tab("https://docs.python.org/3/", title="Python docs", window=2)
    news = provider.open_tab("https://news.example.com/", title="News", window=2)
    provider.open_tab("https://mail.example.com/", title="Mail", window=2, pinned=True)
    reaper.on_installed()
    reaper.events.drain()

    now[0] += 7 * DAY_MS - 30 * 60 * 1000
    reaper.badge.refresh()
    print("at risk badge:", repr(badge.text))

    now[0] += HOUR_MS
    result = scheduler.fire(reaper.config.alarm_name)
    reaper.events.drain()
    print("closed:", sorted(result.closed), "news closed:", news.id not in provider)
    print("docs still open:", docs.id in provider)

    rows, settings = reaper.list_tabs()
    for row in rows:
        print(f"{row.title:40} {row.idle_label:>10} {row.badge or ''}")
    print("maxAgeDays:", settings.max_age_days)


if __name__ == "__main__":
    main()
