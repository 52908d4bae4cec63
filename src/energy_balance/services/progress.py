"""Period averages and logging streaks built on trend windows."""

from dataclasses import replace

from energy_balance.domain.aggregates import PeriodSummary, TrendWindow
from energy_balance.services.aggregation import calorie_progress

# Today plus the 30 days before it.
STREAK_LOOKBACK_DAYS = 31


def logging_streak(window: TrendWindow) -> int:
    """Count consecutive days with logged calories, ending today."""
    streak = 0
    for day in reversed(window.days[-STREAK_LOOKBACK_DAYS:]):
        if day.calories <= 0:
            break
        streak += 1
    return streak


def tail(window: TrendWindow, days: int) -> TrendWindow:
    """Return the last ``days`` days of a window."""
    if days > window.window_size:
        raise ValueError("cannot take more days than the window holds")
    return replace(window, window_size=days, days=window.days[-days:])


def summarize_period(
    window: TrendWindow, target_calories: float, streak_days: int | None = None
) -> PeriodSummary:
    """Average a window's daily values.

    Nutrition and water average over every day in the window; sleep averages
    over the days that have a sleep record. Stale sources carry over from the
    window. The streak is computed from the window unless given.
    """
    days = window.days
    count = max(len(days), 1)
    slept = [day.sleep_hours for day in days if day.has_sleep]
    avg_calories = sum(day.calories for day in days) / count
    return PeriodSummary(
        period_days=window.window_size,
        avg_calories=avg_calories,
        avg_protein_g=sum(day.protein_g for day in days) / count,
        avg_carbs_g=sum(day.carbs_g for day in days) / count,
        avg_fat_g=sum(day.fat_g for day in days) / count,
        avg_water_ml=sum(day.water_ml for day in days) / count,
        avg_sleep_hours=sum(slept) / len(slept) if slept else 0.0,
        calories=calorie_progress(avg_calories, target_calories),
        streak_days=logging_streak(window) if streak_days is None else streak_days,
        stale_sources=window.stale_sources,
    )
