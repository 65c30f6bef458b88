import time
from typing import Dict, Any

from ..core.config_manager import ConfigManager


MODEL_OWNER = "talkai"


class ModelService:
    def __init__(self, config_manager: ConfigManager):
        self.config_manager = config_manager

    def list_models(self) -> Dict[str, Any]:
        created = int(time.time())
        models_list = [
            {
                "id": model_id,
                "object": "model",
                "created": created,
                "owned_by": MODEL_OWNER,
                "name": display_name
            }
            for model_id, display_name in self.config_manager.get_models().items()
        ]
        return {"object": "list", "data": models_list}
