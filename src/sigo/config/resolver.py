from __future__ import annotations

import os
import re
from typing import List, Mapping, Optional

import yaml  # PyYAML; a JSON document is valid YAML
from dotenv import load_dotenv
from loguru import logger

from sigo.config.models import ProviderConfig
from sigo.data.paths import CONFIG_SUFFIX, GatewayPaths
from sigo.errors import ConfigInvalid

_ENV_REF = re.compile(r"^\$\{([A-Za-z_][A-Za-z0-9_]*)\}$")


def load_env_file(paths: GatewayPaths) -> bool:
    """Loads <root>/.env without overriding variables already set."""
    env_path = paths.root / ".env"
    if not env_path.is_file():
        return False
    logger.debug("loading env file {}", env_path)
    return bool(load_dotenv(env_path, override=False))


def expand_env_ref(value: str, env: Optional[Mapping[str, str]] = None) -> str:
    # "${ANTHROPIC_API_KEY}" -> value of that variable ("" when unset)
    m = _ENV_REF.match(value.strip())
    if not m:
        return value
    env = os.environ if env is None else env
    return env.get(m.group(1), "")


def parse_provider_config(raw: object, *, source: str = "<config>", env: Optional[Mapping[str, str]] = None) -> ProviderConfig:
    if not isinstance(raw, Mapping):
        raise ConfigInvalid(f"invalid config: {source} is not a mapping")

    endpoint = str(raw.get("endpoint") or "").strip()
    if not endpoint:
        raise ConfigInvalid(f"invalid config: {source} has no endpoint")

    headers_raw = raw.get("headers") or {}
    if not isinstance(headers_raw, Mapping):
        raise ConfigInvalid(f"invalid config: headers in {source} must be a mapping")
    headers = {}
    for k, v in headers_raw.items():
        if not isinstance(k, str) or not isinstance(v, str):
            raise ConfigInvalid(f"invalid config: header {k!r} in {source} must map a string to a string")
        headers[k] = v

    api_key_ref = str(raw.get("api_key") or "")
    api_key = expand_env_ref(api_key_ref, env)
    if not api_key:
        raise ConfigInvalid("no API key", data={"source": source, "api_key": api_key_ref})

    return ProviderConfig(
        endpoint=endpoint,
        model=str(raw.get("model") or ""),
        api_key=api_key,
        headers=headers,
        kind=str(raw.get("type") or ""),
    )


def load_provider_config(paths: GatewayPaths, model: str) -> ProviderConfig:
    """Reads `.<model>.config` from the gateway root and validates it.

    Raises:
        ConfigInvalid: missing file, unparsable content, no endpoint, or an
            API key that resolves to an empty string.
    """
    path = paths.config_path(model)
    if not path.is_file():
        raise ConfigInvalid(f"config not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigInvalid(f"invalid config: {e}") from e

    cfg = parse_provider_config(raw, source=str(path))
    logger.debug("config {} -> kind={!r} endpoint={}", path.name, cfg.kind, cfg.endpoint)
    return cfg


def list_models(paths: GatewayPaths) -> List[str]:
    names: List[str] = []
    for p in sorted(paths.root.glob(f".*{CONFIG_SUFFIX}")):
        name = p.name[1 : -len(CONFIG_SUFFIX)]
        if name:
            names.append(name)
    return names
