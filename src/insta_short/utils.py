from typing import Optional
from dataclasses import dataclass

from insta_short.config_store import ConfigStore
from insta_short.errors import ConfigError

DEFAULT_API_URL = "https://clicksfly.com/api"
DEFAULT_TIMEOUT = 30
COPY_WINDOW_SECONDS = 2.5


# ========== Config & Models ==========
@dataclass
class Config:
    api_key: str
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    verify_tls: bool = True
    debug: bool = False
    copy_window: float = COPY_WINDOW_SECONDS

    @classmethod
    def init_from_args(cls, args, store: Optional[ConfigStore] = None) -> "Config":
        """Merge command line arguments over the saved config file.

        ``args`` only needs ``api_key``, ``api_url``, ``timeout``,
        ``insecure`` and ``debug`` attributes; ``None`` means "not given".
        """
        store = store or ConfigStore()
        saved = store.load()

        api_key = args.api_key or saved.get("api_key")
        if not api_key:
            raise ConfigError(
                "No API key configured. Pass --api-key, set INSTA_SHORT_API_KEY "
                f"or run `insta-short config --api-key ...` to save it in {store.path}."
            )

        timeout = args.timeout if args.timeout is not None else saved.get("timeout", DEFAULT_TIMEOUT)
        if timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {timeout}.")

        return cls(
            api_key=api_key,
            api_url=args.api_url or saved.get("api_url") or DEFAULT_API_URL,
            timeout=timeout,
            verify_tls=not args.insecure,
            debug=bool(args.debug),
        )


@dataclass
class SubmitResult:
    ok: bool
    status_code: Optional[int]
    text: str
    error: Optional[str] = None
    timed_out: bool = False
