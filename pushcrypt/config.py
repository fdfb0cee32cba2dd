"""
Configuration for pushcrypt, loaded from the environment or a .env file.
"""
from functools import lru_cache

from pydantic_settings import BaseSettings

from pushcrypt.request import ContentCoding
from pushcrypt.vapid import VapidKeys


class Settings(BaseSettings):
    # VAPID keys, base64url raw key material (generate with `pushcrypt generate-keys`)
    vapid_private_key: str = ""
    vapid_public_key: str = ""  # Derived from the private key when empty
    vapid_subject: str = "mailto:admin@example.com"

    # Encryption
    content_coding: ContentCoding = ContentCoding.AES128GCM
    push_ttl: int = 60

    # Delivery
    request_timeout: float = 10.0
    use_cors_proxy: bool = False  # Route non-CORS push services through the proxy
    cors_proxy_url: str = "https://corsproxy.io/?"

    log_level: str = "INFO"

    class Config:
        env_file = ".env"

    def get_vapid_keys(self) -> VapidKeys:
        if not self.vapid_private_key:
            raise ValueError("VAPID_PRIVATE_KEY is not configured")
        if self.vapid_public_key:
            return VapidKeys.from_b64(self.vapid_public_key, self.vapid_private_key)
        return VapidKeys.from_private_b64(self.vapid_private_key)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
