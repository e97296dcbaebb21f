from .step_10_resolve_base import ResolveBaseStep
from .step_20_install_packages import InstallPackagesStep
from .step_30_refresh_trust_store import RefreshTrustStoreStep
from .step_40_create_user import CreateUserStep

__all__ = [
    "ResolveBaseStep",
    "InstallPackagesStep",
    "RefreshTrustStoreStep",
    "CreateUserStep",
]
