from dataclasses import dataclass, field
from pathlib import Path

_DEFAULT_SECRETS = Path.home() / "gws_client_secrets.json"
_DEFAULT_CACHE = Path.home() / "gws_tokens.json"


@dataclass
class SheetsHelperConfig():
    """
    All tunables in one place.
    The dict conversions are a convenience for pushing the state into or
    pulling it out of a json, toml, ini, etc, file.
    """
    # Google Sheets allows 100 requests per 100 seconds per user
    quota_window_seconds: float = 100.0
    max_retries: int = 3
    scopes: list[str] = field(default_factory=lambda: ["sheets"])
    client_secrets: Path = _DEFAULT_SECRETS
    cred_cache: Path = _DEFAULT_CACHE
    auth_server: str = "localhost"
    auth_port: int = 0

    def __post_init__(self) -> None:
        self.client_secrets = Path(self.client_secrets)
        self.cred_cache = Path(self.cred_cache)
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.quota_window_seconds < 0:
            raise ValueError("quota_window_seconds must be >= 0")

    @classmethod
    def from_dict(cls, config: dict) -> "SheetsHelperConfig":
        """
        Set configuration state from a dict.  Missing keys keep their defaults
        and unknown keys are ignored.
        """
        c = cls()
        v = config.get('quota_window_seconds', None)
        if v is not None:
            c.quota_window_seconds = float(v)
        v = config.get('max_retries', None)
        if v is not None:
            c.max_retries = int(v)
        v = config.get('scopes', [])
        if v:
            c.scopes = [v] if isinstance(v, str) else list(v)
        v = config.get('secrets', None)
        if v is not None:
            c.client_secrets = Path(v)
        v = config.get('cache', None)
        if v is not None:
            c.cred_cache = Path(v)
        v = config.get('server', None)
        if v is not None:
            c.auth_server = str(v)
        v = config.get('port', None)
        if v is not None:
            c.auth_port = int(v)
        c.__post_init__()
        return c

    def to_dict(self) -> dict:
        return {
            'quota_window_seconds': self.quota_window_seconds,
            'max_retries': self.max_retries,
            'scopes': list(self.scopes),
            'secrets': str(self.client_secrets),
            'cache': str(self.cred_cache),
            'server': self.auth_server,
            'port': self.auth_port,
        }
