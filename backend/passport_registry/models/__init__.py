# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.

from passport_registry.models.user import User  # noqa: F401  (doit précéder group et person)
from passport_registry.models.group import Group  # noqa: F401
from passport_registry.models.person import Person  # noqa: F401
from passport_registry.models.activity_log import ActivityLog, SYSTEM_PERFORMER  # noqa: F401
