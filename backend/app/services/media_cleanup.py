"""Media cleanup after committed deletes and replacements."""

import logging

from app.core.errors import ExternalServiceError
from app.core.repository_protocols import MediaStorage

logger = logging.getLogger(__name__)


async def destroy_quietly(media: MediaStorage, public_id: str | None) -> None:
    """Destroy an orphaned media asset; failures are logged, the row is already gone."""
    if not public_id:
        return
    try:
        await media.destroy(public_id)
    except ExternalServiceError as e:
        logger.warning(f"Media cleanup failed for {public_id}: {e.message}")
