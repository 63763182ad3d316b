"""Tour catalogue access with caching, static fallback and availability checks."""

import json
import logging
import re
from collections.abc import Mapping
from importlib import resources
from typing import Any, Protocol

from tour_campaign_optimizer.core.config import Settings
from tour_campaign_optimizer.core.exceptions import CacheError, TourDataError
from tour_campaign_optimizer.tours.cache import (
    InMemoryTourCache,
    RedisTourCache,
    TourCache,
)
from tour_campaign_optimizer.tours.models import (
    BookingRow,
    TimeSlotAvailability,
    TimeSlotRow,
    TourCapacity,
    TourConfig,
    TourRow,
)

logger = logging.getLogger(__name__)

CATALOGUE_CACHE_KEY = "tours:catalogue"
DEFAULT_CACHE_TTL = 300
DEFAULT_CUTOFF_HOURS = 24
STATIC_MEETING_POINT = "TBD"

TOUR_TYPE_TO_CONFIG_KEY = {
    "NIGHT_TOUR": "night-tour",
    "MORNING_TOUR": "morning-tour",
    "UJI_TOUR": "uji-tour",
    "UJI_WALKING_TOUR": "uji-walking-tour",
    "GION_TOUR": "gion-tour",
    "MUSIC_TOUR": "music-tour",
    "MUSIC_PERFORMANCE": "music-performance",
}
CONFIG_KEY_TO_TOUR_TYPE = {key: tour_type for tour_type, key in TOUR_TYPE_TO_CONFIG_KEY.items()}


class TourRepository(Protocol):
    """Read-only access to the booking backend."""

    async def list_tours(self) -> list[TourRow | Mapping[str, Any]]: ...

    async def get_tour_capacity(
        self, tour_type: str
    ) -> TourCapacity | Mapping[str, Any] | None: ...

    async def list_confirmed_bookings(
        self, tour_type: str, date: str, time: str
    ) -> list[BookingRow | Mapping[str, Any]]: ...


def get_config_key(tour_type: str) -> str:
    """Convert a backend tour type (``NIGHT_TOUR``) to a config key (``night-tour``)."""
    return TOUR_TYPE_TO_CONFIG_KEY.get(tour_type, tour_type.lower())


def config_key_to_tour_type(config_key: str) -> str:
    """Convert a config key (``night-tour``) to a backend tour type (``NIGHT_TOUR``)."""
    return CONFIG_KEY_TO_TOUR_TYPE.get(
        config_key, config_key.upper().replace("-", "_")
    )


def format_duration(minutes: int | float | str) -> str:
    """Format a duration in minutes for display.

    Strings that are already formatted are tidied up, e.g.
    ``"4 hours 0 minutes"`` becomes ``"4 hours"``.

    Examples:
        >>> format_duration(45)
        '45 minutes'
        >>> format_duration(90)
        '1 hour 30 minutes'
        >>> format_duration(180)
        '3 hours'
    """
    if isinstance(minutes, str):
        text = minutes.strip()
        if not text.isdigit():
            cleaned = re.sub(r"\s+0\s+minutes?", "", text)
            # A trailing "minutes" with no number in front of it
            cleaned = re.sub(r"(?<=[^\d\s])\s+minutes?\s*$", "", cleaned).strip()
            return cleaned or minutes
        minutes = int(text)

    total = int(minutes) if float(minutes).is_integer() else minutes
    if total < 60:
        return f"{total} minutes"

    hours, remaining = divmod(int(total), 60)
    if remaining == 0:
        return f"{hours} {'hour' if hours == 1 else 'hours'}"
    if hours == 1:
        return f"1 hour {remaining} minutes"
    return f"{hours} hours {remaining} minutes"


def extract_time_slots(time_slots: list[TimeSlotRow] | None) -> list[str]:
    """Start times of the active slots, sorted."""
    if not time_slots:
        return []
    return sorted(slot.start_time for slot in time_slots if slot.is_active)


def load_static_catalogue() -> dict[str, dict[str, Any]]:
    """Load the bundled fallback catalogue."""
    source = resources.files("tour_campaign_optimizer.tours").joinpath(
        "static_tours.json"
    )
    with source.open("r", encoding="utf-8") as f:
        return json.load(f)


class ToursService:
    """Serve the tour catalogue from the booking backend.

    The catalogue is cached for ``cache_ttl`` seconds. When the backend
    fails, the bundled static catalogue is served instead and nothing is
    cached, so the next call retries the backend. Concurrent misses are not
    deduplicated.
    """

    def __init__(
        self,
        repository: TourRepository,
        cache: TourCache | None = None,
        cache_ttl: int = DEFAULT_CACHE_TTL,
        static_catalogue: Mapping[str, Mapping[str, Any]] | None = None,
        default_cutoff_hours: int = DEFAULT_CUTOFF_HOURS,
    ):
        """Initialize the service.

        Args:
            repository: Booking backend
            cache: Catalogue cache (defaults to an in-memory TTL cache)
            cache_ttl: Seconds a fetched catalogue stays fresh
            static_catalogue: Fallback catalogue (defaults to the bundled one)
            default_cutoff_hours: Cancellation cutoff when a tour has none
        """
        self.repository = repository
        self.cache = cache if cache is not None else InMemoryTourCache()
        self.cache_ttl = cache_ttl
        self._static_catalogue = static_catalogue
        self.default_cutoff_hours = default_cutoff_hours

    @classmethod
    def from_settings(
        cls, repository: TourRepository, settings: Settings
    ) -> "ToursService":
        """Build a service using Redis when ``tours.redis_url`` is configured."""
        tours_config = settings.tours
        cache: TourCache
        if tours_config.redis_url:
            cache = RedisTourCache.from_url(tours_config.redis_url)
        else:
            cache = InMemoryTourCache()
        return cls(
            repository,
            cache=cache,
            cache_ttl=tours_config.cache_ttl_seconds,
            default_cutoff_hours=tours_config.default_cutoff_hours,
        )

    async def fetch_tours(self) -> dict[str, TourConfig]:
        """All tours keyed by config key."""
        cached = await self._cache_get()
        if cached is not None:
            logger.debug("Using cached tour data")
            return {
                key: TourConfig.model_validate(value) for key, value in cached.items()
            }

        logger.info("Fetching fresh tour data from repository")
        try:
            rows = await self.repository.list_tours()
            tours = self._transform_rows(rows)
        except Exception as e:
            logger.error(f"Error fetching tours, using static catalogue: {e}", exc_info=True)
            return self._static_tours()

        await self._cache_set(
            {key: tour.model_dump(mode="json", by_alias=True) for key, tour in tours.items()}
        )
        logger.info(f"Fetched {len(tours)} tours")
        return tours

    async def get_tour(self, config_key: str) -> TourConfig | None:
        """A tour by config key (e.g. ``morning-tour``), or None."""
        tours = await self.fetch_tours()
        return tours.get(config_key)

    async def clear_cache(self) -> None:
        logger.info("Clearing tours cache")
        await self.cache.delete(CATALOGUE_CACHE_KEY)

    async def _cache_get(self) -> dict[str, Any] | None:
        try:
            return await self.cache.get(CATALOGUE_CACHE_KEY)
        except CacheError as e:
            logger.warning(f"Tour cache unavailable, treating as miss: {e}")
            return None

    async def _cache_set(self, value: dict[str, Any]) -> None:
        try:
            await self.cache.set(CATALOGUE_CACHE_KEY, value, self.cache_ttl)
        except CacheError as e:
            logger.warning(f"Failed to cache tour data: {e}")

    def _transform_rows(
        self, rows: list[TourRow | Mapping[str, Any]]
    ) -> dict[str, TourConfig]:
        tours = {}
        for raw in rows:
            row = raw if isinstance(raw, TourRow) else TourRow.model_validate(raw)
            key = get_config_key(row.type)
            cutoff = (
                row.booking_cutoff_hours
                if row.booking_cutoff_hours is not None
                else self.default_cutoff_hours
            )
            logger.debug(
                f"Processing tour {row.type} ({key}): "
                f"participants {row.min_participants}-{row.max_participants}, "
                f"cutoff {cutoff}h"
            )
            tours[key] = TourConfig(
                id=str(row.id),
                type=row.type,
                title=row.name,
                description=row.description,
                price=row.base_price,
                original_price=row.original_price,
                duration=format_duration(row.duration_minutes),
                reviews=row.reviews or 0,
                time_slots=extract_time_slots(row.time_slots),
                max_participants=row.max_participants,
                min_participants=row.min_participants,
                cancellation_cutoff_hours=cutoff,
                cancellation_cutoff_hours_with_participant=cutoff,
                meeting_point=row.meeting_point,
                updated_at=row.updated_at,
            )
        return tours

    def _static_tours(self) -> dict[str, TourConfig]:
        try:
            catalogue = (
                self._static_catalogue
                if self._static_catalogue is not None
                else load_static_catalogue()
            )
        except (OSError, ValueError) as e:
            raise TourDataError(f"Static tour catalogue unavailable: {e}") from e

        tours = {}
        for key, entry in catalogue.items():
            tours[key] = TourConfig.model_validate(
                {
                    **entry,
                    "min-participants": entry.get("min-participants") or 1,
                    "cancellation-cutoff-hours": self.default_cutoff_hours,
                    "cancellation-cutoff-hours-with-participant": self.default_cutoff_hours,
                    "meeting-point": STATIC_MEETING_POINT,
                    "id": key,
                    "type": config_key_to_tour_type(key),
                }
            )
        return tours

    async def check_local_availability(
        self,
        tour_key: str,
        date: str,
        time_slot: str,
        participants: int = 1,
    ) -> bool:
        """Whether a slot has room for ``participants`` more guests.

        Returns False when the tour is unknown, below its minimum group size,
        or when the backend cannot be queried.
        """
        tour_type = config_key_to_tour_type(tour_key)
        try:
            capacity = await self._get_capacity(tour_type)
            if capacity is None:
                logger.error(f"Tour {tour_type} not found for availability check")
                return False

            if participants < capacity.min_participants:
                logger.info(
                    f"Minimum {capacity.min_participants} participants required, "
                    f"got {participants}"
                )
                return False

            available = await self._available_spots(
                tour_type, capacity, date, time_slot
            )
            return available >= participants
        except Exception as e:
            logger.error(f"Error in local availability check: {e}", exc_info=True)
            return False

    async def get_available_time_slots(
        self, tour_key: str, date: str
    ) -> list[TimeSlotAvailability]:
        """Remaining spots per time slot of a tour on a date.

        Falls back to the catalogue's full capacity per slot when bookings
        cannot be read.
        """
        tour = await self.get_tour(tour_key)
        if tour is None:
            return []

        tour_type = config_key_to_tour_type(tour_key)
        capacity = TourCapacity(
            max_participants=tour.max_participants,
            min_participants=tour.min_participants,
        )
        try:
            return [
                TimeSlotAvailability(
                    time=slot,
                    available_spots=max(
                        0, await self._available_spots(tour_type, capacity, date, slot)
                    ),
                )
                for slot in tour.time_slots
            ]
        except Exception as e:
            logger.error(f"Error getting available time slots: {e}", exc_info=True)
            return [
                TimeSlotAvailability(
                    time=slot, available_spots=tour.max_participants, source="fallback"
                )
                for slot in tour.time_slots
            ]

    async def _get_capacity(self, tour_type: str) -> TourCapacity | None:
        raw = await self.repository.get_tour_capacity(tour_type)
        if raw is None or isinstance(raw, TourCapacity):
            return raw
        return TourCapacity.model_validate(raw)

    async def _available_spots(
        self, tour_type: str, capacity: TourCapacity, date: str, time_slot: str
    ) -> int:
        bookings = await self.repository.list_confirmed_bookings(
            tour_type, date, time_slot
        )
        booked = sum(
            (
                booking
                if isinstance(booking, BookingRow)
                else BookingRow.model_validate(booking)
            ).total_participants
            for booking in bookings
        )
        return capacity.max_participants - booked
