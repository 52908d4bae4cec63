"""Fixed-length, gap-filled trailing windows of daily aggregates."""

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime
from zoneinfo import ZoneInfo

from energy_balance.domain.aggregates import DailyAggregate, TrendWindow
from energy_balance.domain.days import LabelStyle, day_label, shift_days
from energy_balance.domain.errors import InconsistentStateError
from energy_balance.domain.logs import MealEntry, SleepRecord, WaterIntake
from energy_balance.services.aggregation import aggregate_day

DEFAULT_WINDOW = 7


def window_bounds(
    today_key: datetime, window_size: int, tz: ZoneInfo
) -> tuple[datetime, datetime]:
    """Return the first and last day keys of a trailing window."""
    if window_size < 1:
        raise ValueError("window_size must be at least 1")
    return shift_days(today_key, -(window_size - 1), tz), today_key


def build_trend_window(  # noqa: PLR0913
    today_key: datetime,
    tz: ZoneInfo,
    window_size: int = DEFAULT_WINDOW,
    meals: Iterable[MealEntry] = (),
    water: Iterable[WaterIntake] = (),
    sleep: Iterable[SleepRecord] = (),
    label_style: LabelStyle = LabelStyle.WEEKDAY,
) -> TrendWindow:
    """Aggregate every day of the window, oldest first.

    Days without entries appear with zero values; entries outside the
    window are ignored.
    """
    if window_size < 1:
        raise ValueError("window_size must be at least 1")
    meals_by_day: dict[datetime, list[MealEntry]] = defaultdict(list)
    for meal in meals:
        meals_by_day[meal.day_key].append(meal)
    water_by_day = {record.day_key: record for record in water}
    sleep_by_day = {record.day_key: record for record in sleep}

    days: list[DailyAggregate] = []
    for offset in range(window_size - 1, -1, -1):
        key = shift_days(today_key, -offset, tz)
        days.append(
            aggregate_day(
                key,
                day_label(key, today_key, tz, label_style),
                meals_by_day.get(key, ()),
                water_by_day.get(key),
                sleep_by_day.get(key),
            )
        )
    window = TrendWindow(window_size=window_size, days=tuple(days))
    _check_window(window, today_key)
    return window


def _check_window(window: TrendWindow, today_key: datetime) -> None:
    if len(window.days) != window.window_size:
        raise InconsistentStateError(
            f"trend window has {len(window.days)} days, "
            f"expected {window.window_size}"
        )
    keys = [day.day_key for day in window.days]
    if keys != sorted(set(keys)):
        raise InconsistentStateError("trend window is not strictly ascending")
    if keys[-1] != today_key:
        raise InconsistentStateError("trend window does not end today")
