# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# (puits de persistance : rondes terminées et vérifications de points).

from patroltrack.models.patrol_session import PatrolSessionRecord  # noqa: F401
from patroltrack.models.location_check import LocationCheckRecord  # noqa: F401
