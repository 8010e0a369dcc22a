import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from receipt_categorizer.logger import get_logger

logger = get_logger(__name__)


DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_ATTEMPTS = 1
DEFAULT_BACKOFF_SECONDS = 1.0
DEFAULT_PORT = 4000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _resolve_dotenv_path() -> str | None:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        candidate = os.path.join(config_dir, ".env")
        if os.path.exists(candidate):
            return candidate
    resolved = find_dotenv(usecwd=True)
    return resolved or None


def load_environment() -> None:
    dotenv_path = _resolve_dotenv_path()
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)


def get_env_str(name: str, default: str | None = None) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip()
    return value or default


def get_env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning(
            "[ENV] %s='%s' below minimum %s, using default %s.",
            name,
            raw,
            min_value,
            default,
        )
        return default
    return value


def get_env_float(name: str, default: float, min_value: float | None = None) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning(
            "[ENV] %s='%s' below minimum %s, using default %s.",
            name,
            raw,
            min_value,
            default,
        )
        return default
    return value


def get_env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
    return default


@dataclass(frozen=True)
class ClassifierSettings:
    api_key: str | None = None
    model: str = DEFAULT_GEMINI_MODEL
    base_url: str = DEFAULT_GEMINI_BASE_URL
    temperature: float = DEFAULT_TEMPERATURE
    timeout: float | None = None
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff: float = DEFAULT_BACKOFF_SECONDS
    keyword_heuristics: bool = True
    name_matching: bool = True

    @classmethod
    def from_env(cls) -> "ClassifierSettings":
        timeout = get_env_float("CLASSIFIER_TIMEOUT", 0.0, min_value=0.0)
        return cls(
            api_key=get_env_str("GEMINI_API_KEY"),
            model=get_env_str("GEMINI_MODEL", DEFAULT_GEMINI_MODEL) or DEFAULT_GEMINI_MODEL,
            base_url=get_env_str("GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL) or DEFAULT_GEMINI_BASE_URL,
            temperature=get_env_float("GEMINI_TEMPERATURE", DEFAULT_TEMPERATURE, min_value=0.0),
            timeout=timeout or None,
            max_attempts=get_env_int("CLASSIFIER_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS, min_value=1),
            backoff=get_env_float("CLASSIFIER_BACKOFF", DEFAULT_BACKOFF_SECONDS, min_value=0.0),
            keyword_heuristics=get_env_bool("CATEGORIZER_KEYWORD_HEURISTICS", True),
            name_matching=get_env_bool("CATEGORIZER_NAME_MATCHING", True),
        )

    @property
    def classifier_enabled(self) -> bool:
        return bool(self.api_key)


_SENSITIVE_ENV_KEYS = (
    "KEY",
    "TOKEN",
    "SECRET",
    "PASSWORD",
)

_ENV_KEYS_TO_LOG = (
    "LOG_LEVEL",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_BASE_URL",
    "GEMINI_TEMPERATURE",
    "CLASSIFIER_TIMEOUT",
    "CLASSIFIER_MAX_ATTEMPTS",
    "CLASSIFIER_BACKOFF",
    "CATEGORIZER_KEYWORD_HEURISTICS",
    "CATEGORIZER_NAME_MATCHING",
)


def _mask_env_value(name: str, value: str) -> str:
    sanitized = value.replace("\r", "\\r").replace("\n", "\\n")
    if not any(marker in name.upper() for marker in _SENSITIVE_ENV_KEYS):
        return sanitized
    if len(sanitized) <= 4:
        return "****"
    return f"{sanitized[:2]}...{sanitized[-2:]}"


def log_environment() -> None:
    logger.info("[ENV] Logging configured environment variables (masked where needed).")
    for key in _ENV_KEYS_TO_LOG:
        raw_value = os.getenv(key)
        value = "<unset>" if raw_value is None else _mask_env_value(key, raw_value)
        logger.info("[ENV] %s=%s", key, value)


load_environment()
