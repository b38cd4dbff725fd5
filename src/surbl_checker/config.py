import tempfile

from pydantic_settings import BaseSettings

from .yaml_config import get_defaults

_defaults = get_defaults()


class Settings(BaseSettings):
    model_config = {"env_prefix": "SURBL_"}

    # Local cache for the TLD tables
    cache_dir: str = _defaults.get("cache_dir", tempfile.gettempdir())
    refresh_interval_hours: int = _defaults.get("refresh_interval_hours", 24)

    # Remote TLD lists
    two_level_url: str = _defaults.get("two_level_url", "http://www.surbl.org/tld/two-level-tlds")
    three_level_url: str = _defaults.get("three_level_url", "http://www.surbl.org/tld/three-level-tlds")
    connect_timeout: float = _defaults.get("connect_timeout", 30.0)
    read_timeout: float = _defaults.get("read_timeout", 60.0)

    # Blacklist DNS
    blacklist_zone: str = _defaults.get("blacklist_zone", "multi.surbl.org")
    dns_timeout: float = _defaults.get("dns_timeout", 5.0)
    dns_lifetime: float = _defaults.get("dns_lifetime", 10.0)
    nameservers: str = _defaults.get("nameservers", "")
    strict: bool = _defaults.get("strict", False)

    # CLI
    workers: int = _defaults.get("workers", 8)
    log_format: str = _defaults.get("log_format", "json")


settings = Settings()
