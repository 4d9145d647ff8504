from src.services.auth.arkose import ArkoseTokenProvider, ArkoseTokenSource
from src.services.auth.credentials import CredentialState, CredentialStore
from src.services.auth.device_id import derive_device_id
from src.services.auth.puid import get_puid
from src.services.auth.refresher import CredentialRefresher
from src.services.auth.token_refresh import refresh_access_token

__all__ = [
    "ArkoseTokenProvider",
    "ArkoseTokenSource",
    "CredentialRefresher",
    "CredentialState",
    "CredentialStore",
    "derive_device_id",
    "get_puid",
    "refresh_access_token",
]
