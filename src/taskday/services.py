"""Wiring shared by the CLI and embedding applications."""

from dataclasses import dataclass

from .adapters.json_preferences import JsonPreferencesStore
from .adapters.memory_cache import MemoryCache
from .adapters.rest_preferences import RestPreferencesAdapter
from .adapters.sqlite_store import SqliteTaskStore
from .config import Config, load_config
from .counts import CountAggregator
from .filters import TaskFilterEngine
from .ports import PreferencesRepository, TaskStore
from .timezones import TimezoneResolver


@dataclass
class Services:
    """The engine, aggregator and resolver sharing one store and cache."""

    config: Config
    store: TaskStore
    preferences: PreferencesRepository
    resolver: TimezoneResolver
    engine: TaskFilterEngine
    counts: CountAggregator


def get_preferences(config: Config) -> PreferencesRepository:
    """Resolve the preferences backend from config."""
    if config.preferences_url:
        return RestPreferencesAdapter(
            config.preferences_url,
            token=config.preferences_token,
            default_completed_window=config.default_completed_window,
        )
    return JsonPreferencesStore(
        config.preferences_path,
        default_completed_window=config.default_completed_window,
    )


def build_services(
    config: Config | None = None,
    store: TaskStore | None = None,
    preferences: PreferencesRepository | None = None,
) -> Services:
    """Build the service graph. Missing collaborators come from config."""
    if config is None:
        config = load_config()
    if store is None:
        store = SqliteTaskStore(config.database_path)
    if preferences is None:
        preferences = get_preferences(config)
    cache = MemoryCache(sample_size=config.cache_sample_size)

    resolver = TimezoneResolver(
        preferences,
        cache,
        ttl=config.timezone_cache_ttl,
        default_completed_window=config.default_completed_window,
    )
    return Services(
        config=config,
        store=store,
        preferences=preferences,
        resolver=resolver,
        engine=TaskFilterEngine(store, resolver, max_page_size=config.max_page_size),
        counts=CountAggregator(store, resolver, cache, ttl=config.count_cache_ttl),
    )
