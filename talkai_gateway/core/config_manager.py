import yaml
import os
import asyncio
from dataclasses import dataclass, field
from typing import Dict, Any, List, Mapping, Optional
from .logging import logger
from ..utils.generate_key import generate_key


DEFAULT_PORT = 9091
DEFAULT_MODEL = "claude-opus-4-1-20250805"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT = 300

_TRUE_VALUES = ("1", "t", "true", "yes", "y", "on")
_FALSE_VALUES = ("0", "f", "false", "no", "n", "off")


@dataclass(frozen=True)
class GatewayConfig:
    port: int = DEFAULT_PORT
    api_keys: List[str] = field(default_factory=list)
    default_stream: bool = False
    default_model: str = DEFAULT_MODEL
    default_temperature: float = DEFAULT_TEMPERATURE
    timeout: int = DEFAULT_TIMEOUT
    debug_mode: bool = False
    dashboard_enabled: bool = True


class ConfigManager:
    def __init__(self, config_dir: str = "config", environ: Optional[Mapping[str, str]] = None):
        self.config_dir = config_dir
        self.models_path = os.path.join(config_dir, "models.yaml")
        self.environ = os.environ if environ is None else environ

        self.config = self._load_env_config()
        self.client_api_keys = self._load_client_api_keys()
        self.models = self._load_models()
        self.last_mtimes = {}
        self._initialize_mtimes()
        self._reloader_task = None

        logger.info("Configuration manager initialized", config={
            "config_dir": config_dir,
            "port": self.config.port,
            "debug_enabled": self.config.debug_mode,
            "dashboard_enabled": self.config.dashboard_enabled,
            "models_config_exists": os.path.exists(self.models_path),
            "models_count": len(self.models)
        })

    def _parse(self, name: str, default, parser):
        raw = self.environ.get(name, "")
        if raw == "":
            return default
        try:
            return parser(raw)
        except ValueError:
            logger.warning(f"Ignoring invalid value for {name}: {raw!r}, using default {default!r}")
            return default

    @staticmethod
    def _parse_bool(raw: str) -> bool:
        value = raw.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise ValueError(raw)

    def _load_env_config(self) -> GatewayConfig:
        api_keys = [key.strip() for key in self.environ.get("API_KEYS", "").split(",")]
        return GatewayConfig(
            port=self._parse("PORT", DEFAULT_PORT, int),
            api_keys=[key for key in api_keys if key],
            default_stream=self._parse("DEFAULT_STREAM", False, self._parse_bool),
            default_model=self.environ.get("DEFAULT_MODEL") or DEFAULT_MODEL,
            default_temperature=self._parse("DEFAULT_TEMPERATURE", DEFAULT_TEMPERATURE, float),
            timeout=self._parse("TIMEOUT", DEFAULT_TIMEOUT, int),
            debug_mode=self._parse("DEBUG_MODE", False, self._parse_bool),
            dashboard_enabled=self._parse("DASHBOARD_ENABLED", True, self._parse_bool),
        )

    def _load_client_api_keys(self) -> List[str]:
        if self.config.api_keys:
            logger.info(f"Loaded {len(self.config.api_keys)} API keys from environment")
            return list(self.config.api_keys)

        # No keys configured: generate one
        default_key = generate_key()
        logger.info(f"Generated default API key: {default_key}")
        logger.info("Set API_KEYS to use your own API keys")
        return [default_key]

    def _load_models(self) -> Dict[str, str]:
        try:
            with open(self.models_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError as e:
            logger.error(f"Models file not found: {e}", config={
                "error_type": "file_not_found",
                "file_path": self.models_path
            })
            return {}
        except yaml.YAMLError as e:
            logger.error(f"Error parsing models file: {e}", config={
                "error_type": "yaml_parse_error",
                "file_path": self.models_path
            })
            return {}

        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, dict):
            logger.error("Models file has no 'models' mapping", config={
                "error_type": "invalid_models_file",
                "file_path": self.models_path
            })
            return {}
        return {str(model_id): str(name) for model_id, name in models.items()}

    def get_config(self) -> GatewayConfig:
        return self.config

    def get_models(self) -> Dict[str, str]:
        return self.models

    @property
    def is_debug_enabled(self) -> bool:
        return self.config.debug_mode

    def reload_models(self):
        logger.info("Reloading model map", config={
            "operation": "reload_models",
            "file_path": self.models_path
        })
        self.models = self._load_models()
        logger.info("Model map reloaded", config={
            "operation": "reload_complete",
            "models_count": len(self.models)
        })

    def _initialize_mtimes(self):
        try:
            self.last_mtimes[self.models_path] = os.path.getmtime(self.models_path)
        except FileNotFoundError:
            pass

    def models_file_changed(self) -> bool:
        try:
            mtime = os.path.getmtime(self.models_path)
        except FileNotFoundError:
            return False
        if self.last_mtimes.get(self.models_path, 0) < mtime:
            self.last_mtimes[self.models_path] = mtime
            return True
        return False

    async def _reload_models_task(self, interval: float):
        while True:
            if self.models_file_changed():
                logger.debug("Models file changed, triggering reload")
                self.reload_models()
            await asyncio.sleep(interval)

    def start_reloader_task(self, interval: float = 5.0):
        self._reloader_task = asyncio.create_task(self._reload_models_task(interval))

    def stop_reloader_task(self):
        if self._reloader_task is not None:
            self._reloader_task.cancel()
            self._reloader_task = None

    def log_summary(self):
        config = self.config
        logger.info("Server configuration:")
        logger.info(f"  Port: {config.port}")
        logger.info(f"  Default stream: {config.default_stream}")
        logger.info(f"  Default model: {config.default_model}")
        logger.info(f"  Default temperature: {config.default_temperature:.1f}")
        logger.info(f"  Timeout: {config.timeout} seconds")
        logger.info(f"  Debug mode: {config.debug_mode}")
        logger.info(f"  Dashboard enabled: {config.dashboard_enabled}")
        logger.info(f"  API keys: {len(self.client_api_keys)} configured")
