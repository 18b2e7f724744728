"""
Relevé best-effort des coordonnées GPS au moment de la soumission.

Un refus, une erreur ou un dépassement du délai donne « pas de coordonnées » :
la vérification n'est jamais bloquée par la géolocalisation.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Optional

from patroltrack.schemas.location import Coordinates

logger = logging.getLogger(__name__)

GeolocationProvider = Callable[[], Optional[Coordinates]]

def capture_coordinates(
    provider: Optional[GeolocationProvider],
    timeout_seconds: float,
) -> Optional[Coordinates]:
    """Interroge le fournisseur avec un délai borné ; None en cas d'échec."""
    if provider is None:
        return None

    # Un exécuteur par appel : un fournisseur bloqué n'occupe que son propre thread
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="geolocation")
    future = executor.submit(provider)
    try:
        return future.result(timeout=timeout_seconds)
    except FutureTimeoutError:
        future.cancel()
        logger.warning("Géolocalisation abandonnée après %.1fs", timeout_seconds)
        return None
    except Exception as exc:
        # Refus ou panne du fournisseur : la soumission continue sans position
        logger.warning("Géolocalisation indisponible : %s", exc)
        return None
    finally:
        executor.shutdown(wait=False)
