"""FastAPI application factory."""

import logging
from uuid import UUID

from fastapi import FastAPI, Query, Request, status
from fastapi.responses import JSONResponse

from energy_balance.api.models import (
    EnergyInputs,
    FoodCreate,
    MealCreate,
    ProfileCreate,
    ProfileUpdate,
    RecalculateRequest,
    SleepLog,
    SleepUpdate,
    WaterChange,
)
from energy_balance.app_logging import configure_logging
from energy_balance.containers import AppContainer
from energy_balance.domain.aggregates import Period
from energy_balance.domain.days import LabelStyle
from energy_balance.domain.errors import (
    InconsistentStateError,
    NotFoundError,
    ProfileValidationError,
)
from energy_balance.services.energy import advice_context


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    settings = container.settings

    app = FastAPI()
    app.state.container = container

    @app.exception_handler(ProfileValidationError)
    async def validation_error(
        _request: Request, exc: ProfileValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": {"field": exc.field, "message": exc.message}},
        )

    @app.exception_handler(NotFoundError)
    async def not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": f"{exc.entity.capitalize()} not found."},
        )

    @app.exception_handler(InconsistentStateError)
    async def inconsistent_state(
        request: Request, exc: InconsistentStateError
    ) -> JSONResponse:
        logger.error(
            "Inconsistent state while handling %s %s: %s",
            request.method,
            request.url.path,
            exc,
        )
        detail = str(exc) if settings.expose_error_details else "Internal error."
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": detail},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/profiles", status_code=status.HTTP_201_CREATED)
    async def create_profile(payload: ProfileCreate) -> dict[str, object]:
        """Create a profile."""
        profile = await container.profile_service.create_profile(
            **payload.model_dump()
        )
        return {"profile": profile}

    @app.get("/profiles")
    async def list_profiles() -> dict[str, object]:
        """Return every profile and the current one."""
        profiles = await container.profile_service.list_profiles()
        current = await container.profile_service.current_profile()
        return {
            "profiles": profiles,
            "current_profile_id": current.id if current else None,
        }

    @app.get("/profiles/{profile_id}")
    async def get_profile(profile_id: UUID) -> dict[str, object]:
        """Return one profile."""
        return {"profile": await container.profile_service.get_profile(profile_id)}

    @app.patch("/profiles/{profile_id}")
    async def update_profile(
        profile_id: UUID, payload: ProfileUpdate
    ) -> dict[str, object]:
        """Apply a partial profile update."""
        profile = await container.profile_service.update_profile(
            profile_id, **payload.model_dump(exclude_none=True)
        )
        return {"profile": profile}

    @app.delete("/profiles/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_profile(profile_id: UUID) -> None:
        """Delete a profile and everything it owns."""
        await container.profile_service.delete_profile(profile_id)

    @app.post("/profiles/{profile_id}/select")
    async def select_profile(profile_id: UUID) -> dict[str, object]:
        """Make a profile current."""
        return {"profile": await container.profile_service.switch_profile(profile_id)}

    @app.post("/energy/preview")
    async def preview_energy(payload: EnergyInputs) -> dict[str, object]:
        """Compute energy figures without saving them."""
        return {"calculation": container.energy_service.preview(payload.to_domain())}

    @app.post("/energy/recalculate", status_code=status.HTTP_201_CREATED)
    async def recalculate_energy(payload: RecalculateRequest) -> dict[str, object]:
        """Compute and save a new energy record."""
        record = await container.energy_service.recalculate(
            payload.to_domain(), payload.profile_id
        )
        return {"record": record}

    @app.get("/profiles/{profile_id}/energy")
    async def energy_history(profile_id: UUID) -> dict[str, object]:
        """Return the active record, the full history and advice context."""
        profile = await container.profile_service.get_profile(profile_id)
        history = await container.energy_service.history(profile.id)
        active = await container.energy_service.active_record(profile.id)
        return {
            "active": active,
            "history": history,
            "advice_context": advice_context(active, profile.goal) if active else None,
        }

    @app.post("/foods", status_code=status.HTTP_201_CREATED)
    async def create_food(payload: FoodCreate) -> dict[str, object]:
        """Create a custom food item."""
        return {"food": await container.log_service.create_food(**payload.model_dump())}

    @app.post("/profiles/{profile_id}/meals", status_code=status.HTTP_201_CREATED)
    async def log_meal(profile_id: UUID, payload: MealCreate) -> dict[str, object]:
        """Log a meal for a profile."""
        entry = await container.log_service.log_meal(
            profile_id,
            payload.food_item_id,
            payload.quantity,
            meal_type=payload.meal_type,
            source=payload.source,
            at=payload.logged_at,
        )
        return {"meal": entry}

    @app.delete(
        "/profiles/{profile_id}/meals/{meal_id}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    async def delete_meal(profile_id: UUID, meal_id: UUID) -> None:
        """Delete a meal entry."""
        await container.log_service.delete_meal(profile_id, meal_id)

    @app.post("/profiles/{profile_id}/water")
    async def add_water(profile_id: UUID, payload: WaterChange) -> dict[str, object]:
        """Add a glass of water to today's total."""
        record = await container.log_service.add_water(
            profile_id, settings.water_glass_ml if payload.ml is None else payload.ml
        )
        return {"water": record}

    @app.post("/profiles/{profile_id}/water/remove")
    async def remove_water(
        profile_id: UUID, payload: WaterChange
    ) -> dict[str, object]:
        """Remove a glass of water from today's total."""
        record = await container.log_service.remove_water(
            profile_id, settings.water_glass_ml if payload.ml is None else payload.ml
        )
        return {"water": record}

    @app.delete("/profiles/{profile_id}/water", status_code=status.HTTP_204_NO_CONTENT)
    async def reset_water(profile_id: UUID) -> None:
        """Reset today's water total."""
        await container.log_service.reset_water(profile_id)

    @app.put("/profiles/{profile_id}/sleep")
    async def log_sleep(profile_id: UUID, payload: SleepLog) -> dict[str, object]:
        """Record today's sleep."""
        record = await container.log_service.log_sleep(
            profile_id,
            payload.bedtime,
            payload.wake_time,
            payload.quality,
            payload.notes,
        )
        return {"sleep": record}

    @app.patch("/profiles/{profile_id}/sleep")
    async def update_sleep(profile_id: UUID, payload: SleepUpdate) -> dict[str, object]:
        """Partially update today's sleep."""
        record = await container.log_service.update_sleep(
            profile_id, **payload.model_dump(exclude_none=True)
        )
        return {"sleep": record}

    @app.delete("/profiles/{profile_id}/sleep", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_sleep(profile_id: UUID) -> None:
        """Delete today's sleep record."""
        await container.log_service.delete_sleep(profile_id)

    @app.post("/profiles/{profile_id}/favorites/{entry_id}")
    async def toggle_favorite(profile_id: UUID, entry_id: UUID) -> dict[str, object]:
        """Toggle the favorite flag on a meal entry."""
        await container.profile_service.get_profile(profile_id)
        value = container.favorites_service.toggle(profile_id, entry_id)
        return {"entry_id": entry_id, "is_favorite": value}

    @app.get("/profiles/{profile_id}/dashboard")
    async def dashboard(profile_id: UUID) -> dict[str, object]:
        """Return a freshly composed dashboard."""
        state = await container.dashboard_service.snapshot(profile_id)
        return {"dashboard": state, "is_stale": state.is_stale}

    @app.get("/profiles/{profile_id}/trends")
    async def trends(
        profile_id: UUID,
        window: int | None = Query(default=None, ge=1, le=366),
        labels: LabelStyle = LabelStyle.WEEKDAY,
    ) -> dict[str, object]:
        """Return a trailing window of daily aggregates, oldest first."""
        trend = await container.dashboard_service.trend(profile_id, window, labels)
        return {"trend": trend, "is_stale": trend.is_stale}

    @app.get("/profiles/{profile_id}/progress")
    async def progress(
        profile_id: UUID, period: Period = Period.WEEK
    ) -> dict[str, object]:
        """Return period averages and the logging streak."""
        summary = await container.dashboard_service.period_summary(profile_id, period)
        return {"period": period, "summary": summary, "is_stale": summary.is_stale}

    return app
