"""Client credential issuance and persistence."""

from .bootstrapper import (
	AUTH_PATH,
	CredentialBootstrapResult,
	CredentialBootstrapStatus,
	CredentialBootstrapper,
)
from .store import ACCESS_KEY_FILE_NAME, ACCESS_KEY_MODE, AccessKeyStore

__all__ = [
	"ACCESS_KEY_FILE_NAME",
	"ACCESS_KEY_MODE",
	"AUTH_PATH",
	"AccessKeyStore",
	"CredentialBootstrapResult",
	"CredentialBootstrapStatus",
	"CredentialBootstrapper",
]
