from typing import Mapping, TypedDict, TypeVar

U = TypeVar("U", bound=TypedDict("U", {}))


def resolve_config(config: Mapping | None, default_config: U) -> U:
    """Overlay *config* on a copy of *default_config*, rejecting unknown keys."""
    unknown = sorted(set(config or {}) - set(default_config))
    if unknown:
        raise ValueError(f"Unknown configuration key(s): {', '.join(unknown)}")
    _config = default_config.copy()
    if config:
        _config.update(config)
    return _config
