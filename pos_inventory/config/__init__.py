from .settings import BackendCfg, CacheCfg, Paths, Settings, configure_logging

__all__ = [
    "BackendCfg",
    "CacheCfg",
    "Paths",
    "Settings",
    "configure_logging",
]
