"""Best-effort duplicate detection for new listings.

A listing is a possible duplicate of a live listing when the address is
exactly equal, or when both latitude and longitude are exactly equal. Hits are
flagged for an admin to look at; they never block the submission. Formatting
differences in the address or slightly shifted coordinates are not caught.
"""

from typing import List, Optional
from uuid import UUID

from app.core.exceptions import StorageError
from app.core.logging import get_logger
from app.repositories.property_repository import PropertyRepository
from app.schemas.property import DuplicateFlag

logger = get_logger(__name__)


class DuplicateDetector:
    def __init__(self, repository: PropertyRepository):
        self.repository = repository

    def check(
        self,
        address: str,
        latitude: float,
        longitude: float,
        exclude_id: Optional[UUID] = None,
    ) -> List[DuplicateFlag]:
        try:
            by_address = self.repository.find_live_by_address(address, exclude_id)
            by_coordinates = self.repository.find_live_by_coordinates(latitude, longitude, exclude_id)
        except StorageError:
            # Flags are advisory; a failed lookup must not stop the submission
            logger.warning("Duplicate check skipped for %r: lookup failed", address)
            return []

        flags: List[DuplicateFlag] = []
        seen = set()
        for property_id in by_address:
            seen.add(property_id)
            flags.append(DuplicateFlag(property_id=property_id, match="address"))
        for property_id in by_coordinates:
            if property_id not in seen:
                seen.add(property_id)
                flags.append(DuplicateFlag(property_id=property_id, match="coordinates"))

        if flags:
            logger.warning(
                "Potential duplicate listing at %r (%s, %s): %s",
                address,
                latitude,
                longitude,
                ", ".join(f"{f.property_id} ({f.match})" for f in flags),
                extra={"context": {"duplicates": [f.model_dump(mode="json") for f in flags]}},
            )
        return flags
