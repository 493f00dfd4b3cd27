from .production_service import ProductionPlanningService
from .raw_material_service import RawMaterialService

__all__ = [
    'ProductionPlanningService',
    'RawMaterialService'
]
