"""Reactive composition of every derived view for a profile.

The service keeps the latest value of each source, reloads only the sources
named by a batch of change events and recomposes one immutable
DashboardState per batch.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID

from energy_balance.domain.aggregates import (
    DashboardState,
    FavoriteFood,
    MealView,
    Period,
    PeriodSummary,
    TrendWindow,
)
from energy_balance.domain.days import LabelStyle, day_key
from energy_balance.domain.energy import EnergyRecord
from energy_balance.domain.errors import NotFoundError
from energy_balance.domain.logs import MealEntry, SleepRecord, WaterIntake
from energy_balance.domain.profiles import Profile
from energy_balance.services.aggregation import calorie_progress, macro_progress
from energy_balance.services.changes import ChangeEvent, ChangeNotifier, Topic
from energy_balance.services.energy import (
    EnergyRecordRepository,
    select_active_record,
)
from energy_balance.services.favorites import FavoriteStore
from energy_balance.services.logs import (
    MealRepository,
    SleepRepository,
    WaterRepository,
)
from energy_balance.services.profiles import ProfileService, profile_zone
from energy_balance.services.progress import (
    STREAK_LOOKBACK_DAYS,
    logging_streak,
    summarize_period,
    tail,
)
from energy_balance.services.trends import (
    DEFAULT_WINDOW,
    build_trend_window,
    window_bounds,
)

_logger = logging.getLogger(__name__)

DEFAULT_TARGET_CALORIES = 2000.0


class Source(StrEnum):
    """Independently loaded input of the dashboard."""

    PROFILE = "profile"
    ENERGY = "energy"
    MEALS = "meals"
    WATER = "water"
    SLEEP = "sleep"
    FAVORITES = "favorites"


_TOPIC_SOURCES = {
    Topic.PROFILE: Source.PROFILE,
    Topic.ENERGY: Source.ENERGY,
    Topic.MEALS: Source.MEALS,
    Topic.WATER: Source.WATER,
    Topic.SLEEP: Source.SLEEP,
    Topic.FAVORITES: Source.FAVORITES,
}

_ALL_SOURCES = frozenset(Source)


@dataclass(frozen=True)
class SourceSnapshot:
    """Latest loaded value of every source for one profile and day."""

    profile: Profile
    today_key: datetime
    energy_records: tuple[EnergyRecord, ...] = ()
    meals: tuple[MealEntry, ...] = ()
    water: tuple[WaterIntake, ...] = ()
    sleep: tuple[SleepRecord, ...] = ()
    favorites: frozenset[UUID] = frozenset()
    stale: frozenset[str] = frozenset()


def sources_for(events: Iterable[ChangeEvent]) -> frozenset[Source]:
    """Map change events to the sources they invalidate."""
    return frozenset(
        _TOPIC_SOURCES[event.topic]
        for event in events
        if event.topic in _TOPIC_SOURCES
    )


def meal_views(
    meals: Iterable[MealEntry], favorites: frozenset[UUID]
) -> tuple[MealView, ...]:
    """Project meals for display, oldest first, with the favorite overlay."""
    return tuple(
        MealView(
            id=meal.id,
            food_name=meal.food_name,
            meal_type=meal.meal_type,
            logged_at=meal.logged_at,
            calories=meal.calories,
            protein_g=meal.protein_g,
            carbs_g=meal.carbs_g,
            fat_g=meal.fat_g,
            source=meal.source,
            is_favorite=meal.id in favorites,
        )
        for meal in sorted(meals, key=lambda meal: meal.logged_at)
    )


def favorite_foods(
    meals: Iterable[MealEntry], favorites: frozenset[UUID]
) -> tuple[FavoriteFood, ...]:
    """Favorited meals, newest first, keeping one entry per food name."""
    seen: set[str] = set()
    foods: list[FavoriteFood] = []
    for meal in sorted(meals, key=lambda meal: meal.logged_at, reverse=True):
        if meal.id not in favorites or meal.food_name in seen:
            continue
        seen.add(meal.food_name)
        foods.append(
            FavoriteFood(
                entry_id=meal.id,
                food_item_id=meal.food_item_id,
                name=meal.food_name,
                calories=meal.calories,
                protein_g=meal.protein_g,
                carbs_g=meal.carbs_g,
                fat_g=meal.fat_g,
            )
        )
    return tuple(foods)


def compose_dashboard(  # noqa: PLR0913
    sources: SourceSnapshot,
    now: datetime,
    version: int,
    window_size: int = DEFAULT_WINDOW,
    default_target_calories: float = DEFAULT_TARGET_CALORIES,
    label_style: LabelStyle = LabelStyle.WEEKDAY,
) -> DashboardState:
    """Build one dashboard state from loaded sources."""
    tz = profile_zone(sources.profile)
    trend = build_trend_window(
        sources.today_key,
        tz,
        window_size,
        sources.meals,
        sources.water,
        sources.sleep,
        label_style,
    )
    today = trend.days[-1]
    record = select_active_record(sources.energy_records)
    target = record.target_calories if record else default_target_calories
    todays_meals = [
        meal for meal in sources.meals if meal.day_key == sources.today_key
    ]
    return DashboardState(
        profile=sources.profile,
        active_record=record,
        today=today,
        calories=calorie_progress(today.calories, target),
        macros=macro_progress(today, record),
        today_meals=meal_views(todays_meals, sources.favorites),
        favorite_foods=favorite_foods(sources.meals, sources.favorites),
        trend=trend,
        stale_sources=sources.stale,
        version=version,
        computed_at=now,
    )


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DashboardService:
    """Keeps derived views in step with their sources."""

    profile_service: ProfileService
    energy_records: EnergyRecordRepository
    meals: MealRepository
    water: WaterRepository
    sleep: SleepRepository
    favorites: FavoriteStore
    notifier: ChangeNotifier
    window_days: int = DEFAULT_WINDOW
    default_target_calories: float = DEFAULT_TARGET_CALORIES
    clock: Callable[[], datetime] = _utcnow

    async def snapshot(self, profile_id: UUID) -> DashboardState:
        """Load every source once and compose a single state."""
        profile = await self.profile_service.get_profile(profile_id)
        sources = await self._load_all(profile)
        return self._compose(sources, version=1)

    async def stream(self, profile_id: UUID) -> AsyncIterator[DashboardState]:
        """Yield a state now and one more per batch of changes.

        The stream ends when the profile is deleted.
        """
        subscription = self.notifier.subscribe(profile_id)
        try:
            profile = await self.profile_service.get_profile(profile_id)
            sources = await self._load_all(profile)
            version = 1
            yield self._compose(sources, version)
            while True:
                batch = await subscription.next_batch()
                try:
                    sources = await self._refresh(sources, sources_for(batch))
                except NotFoundError:
                    _logger.info(
                        "Profile removed, closing dashboard stream",
                        extra={"profile_id": str(profile_id)},
                    )
                    return
                version += 1
                yield self._compose(sources, version)
        finally:
            subscription.close()

    async def stream_current(self) -> AsyncIterator[DashboardState | None]:
        """Yield states for whichever profile is current.

        A selection change rebuilds every source for the new profile. None is
        yielded while no profile is current.
        """
        subscription = self.notifier.subscribe()
        try:
            sources = await self._load_current()
            version = 1
            yield self._compose(sources, version) if sources else None
            while True:
                batch = await subscription.next_batch()
                topics = {event.topic for event in batch}
                current_id = sources.profile.id if sources else None
                if topics & {Topic.SELECTION, Topic.PROFILE}:
                    profile = await self.profile_service.current_profile()
                    if (profile.id if profile else None) != current_id:
                        sources = await self._load_profile(profile)
                        version += 1
                        yield self._compose(sources, version) if sources else None
                        continue
                relevant = [event for event in batch if event.profile_id == current_id]
                if sources is None or not relevant:
                    continue
                try:
                    sources = await self._refresh(sources, sources_for(relevant))
                except NotFoundError:
                    sources = await self._load_current()
                version += 1
                yield self._compose(sources, version) if sources else None
        finally:
            subscription.close()

    async def trend(
        self,
        profile_id: UUID,
        window_size: int | None = None,
        label_style: LabelStyle = LabelStyle.WEEKDAY,
    ) -> TrendWindow:
        """Build a trend window of the given size ending today."""
        profile = await self.profile_service.get_profile(profile_id)
        return await self._window(profile, window_size or self.window_days, label_style)

    async def period_summary(self, profile_id: UUID, period: Period) -> PeriodSummary:
        """Summarize a trailing period against the active calorie target."""
        profile = await self.profile_service.get_profile(profile_id)
        window = await self._window(
            profile, max(period.days, STREAK_LOOKBACK_DAYS), LabelStyle.SHORT_DATE
        )
        loaded, failed = await self._load_sources(
            profile,
            {
                Source.ENERGY: lambda: _as_tuple(
                    self.energy_records.list_records, profile.id
                ),
            },
        )
        record = select_active_record(loaded.get(Source.ENERGY, ()))
        target = record.target_calories if record else self.default_target_calories
        summary = summarize_period(
            tail(window, period.days), target, streak_days=logging_streak(window)
        )
        return replace(summary, stale_sources=summary.stale_sources | failed)

    async def _window(
        self, profile: Profile, window_size: int, label_style: LabelStyle
    ) -> TrendWindow:
        """Load and bucket a window; failed sources are empty and stale."""
        tz = profile_zone(profile)
        today_key = day_key(self.clock(), tz)
        start, end = window_bounds(today_key, window_size, tz)
        loaded, failed = await self._load_sources(
            profile,
            {
                Source.MEALS: lambda: _as_tuple(
                    self.meals.list_meals, profile.id, start, end
                ),
                Source.WATER: lambda: _as_tuple(
                    self.water.list_water, profile.id, start, end
                ),
                Source.SLEEP: lambda: _as_tuple(
                    self.sleep.list_sleep, profile.id, start, end
                ),
            },
        )
        window = build_trend_window(
            today_key,
            tz,
            window_size,
            loaded.get(Source.MEALS, ()),
            loaded.get(Source.WATER, ()),
            loaded.get(Source.SLEEP, ()),
            label_style,
        )
        return replace(window, stale_sources=failed)

    def _compose(self, sources: SourceSnapshot, version: int) -> DashboardState:
        return compose_dashboard(
            sources,
            self.clock(),
            version,
            self.window_days,
            self.default_target_calories,
        )

    async def _load_current(self) -> SourceSnapshot | None:
        return await self._load_profile(await self.profile_service.current_profile())

    async def _load_profile(self, profile: Profile | None) -> SourceSnapshot | None:
        if profile is None:
            return None
        return await self._load_all(profile)

    async def _load_all(self, profile: Profile) -> SourceSnapshot:
        empty = SourceSnapshot(
            profile=profile, today_key=day_key(self.clock(), profile_zone(profile))
        )
        return await self._reload(empty, _ALL_SOURCES - {Source.PROFILE})

    async def _refresh(
        self, previous: SourceSnapshot, changed: frozenset[Source]
    ) -> SourceSnapshot:
        """Reload changed sources; everything after a day or timezone change."""
        sources = previous
        if Source.PROFILE in changed:
            sources = await self._reload(sources, frozenset({Source.PROFILE}))
        today_key = day_key(self.clock(), profile_zone(sources.profile))
        if today_key != previous.today_key:
            _logger.info(
                "Day changed, reloading all sources",
                extra={"profile_id": str(sources.profile.id)},
            )
            sources = replace(sources, today_key=today_key)
            return await self._reload(sources, _ALL_SOURCES - {Source.PROFILE})
        return await self._reload(sources, changed - {Source.PROFILE})

    async def _reload(
        self, sources: SourceSnapshot, names: frozenset[Source]
    ) -> SourceSnapshot:
        if not names:
            return sources
        profile = sources.profile
        tz = profile_zone(profile)
        start, end = window_bounds(sources.today_key, self.window_days, tz)
        loaders: dict[Source, Callable[[], Awaitable[object]]] = {
            Source.PROFILE: lambda: self.profile_service.get_profile(profile.id),
            Source.ENERGY: lambda: _as_tuple(
                self.energy_records.list_records, profile.id
            ),
            Source.MEALS: lambda: _as_tuple(
                self.meals.list_meals, profile.id, start, end
            ),
            Source.WATER: lambda: _as_tuple(
                self.water.list_water, profile.id, start, end
            ),
            Source.SLEEP: lambda: _as_tuple(
                self.sleep.list_sleep, profile.id, start, end
            ),
            Source.FAVORITES: lambda: asyncio.to_thread(
                self.favorites.favorites, profile.id
            ),
        }
        loaded, failed = await self._load_sources(
            profile, {name: loaders[name] for name in names}
        )
        changes = {_FIELD_FOR_SOURCE[name]: value for name, value in loaded.items()}
        stale = (sources.stale - {name.value for name in loaded}) | failed
        return replace(sources, **changes, stale=stale)

    async def _load_sources(
        self,
        profile: Profile,
        loaders: dict[Source, Callable[[], Awaitable[object]]],
    ) -> tuple[dict[Source, object], frozenset[str]]:
        """Run loaders concurrently, returning loaded values and failed names.

        A missing profile propagates; any other failure is logged and the
        source is left out of the loaded values.
        """
        ordered = sorted(loaders)
        results = await asyncio.gather(
            *(loaders[name]() for name in ordered), return_exceptions=True
        )
        loaded: dict[Source, object] = {}
        failed: set[str] = set()
        for name, result in zip(ordered, results, strict=True):
            if isinstance(result, NotFoundError) and name == Source.PROFILE:
                raise result
            if isinstance(result, Exception):
                _logger.exception(
                    "Failed to load %s",
                    name.value,
                    exc_info=result,
                    extra={"profile_id": str(profile.id)},
                )
                failed.add(name.value)
                continue
            if isinstance(result, BaseException):
                raise result
            loaded[name] = result
        return loaded, frozenset(failed)


_FIELD_FOR_SOURCE = {
    Source.PROFILE: "profile",
    Source.ENERGY: "energy_records",
    Source.MEALS: "meals",
    Source.WATER: "water",
    Source.SLEEP: "sleep",
    Source.FAVORITES: "favorites",
}


async def _as_tuple(func: Callable[..., Iterable[object]], *args: object) -> tuple:
    return tuple(await asyncio.to_thread(func, *args))
