"""Application services: catalog, codec, evaluators, category selection, transfer policy."""

from authcore.application.services.authorization_service import AuthorizationService
from authcore.application.services.category_selection import (
    CategorySelection,
    category_state,
    toggle_category,
    toggle_one,
)
from authcore.application.services.local_auth_evaluator import LocalAuthEvaluator
from authcore.application.services.permission_catalog import (
    PermissionCatalog,
    PermissionCatalogLoader,
)
from authcore.application.services.permission_codec import (
    PermissionCodec,
    RemotePermissionCodec,
    apply_super_user_closure,
)
from authcore.application.services.remote_role_evaluator import (
    RemoteRoleEvaluator,
    RoleCheckLifetime,
)
from authcore.application.services.transfer_policy import (
    TRANSFER_ROUTES,
    TransferPolicyMatrix,
)

__all__ = [
    "AuthorizationService",
    "CategorySelection",
    "LocalAuthEvaluator",
    "PermissionCatalog",
    "PermissionCatalogLoader",
    "PermissionCodec",
    "RemotePermissionCodec",
    "RemoteRoleEvaluator",
    "RoleCheckLifetime",
    "TRANSFER_ROUTES",
    "TransferPolicyMatrix",
    "apply_super_user_closure",
    "category_state",
    "toggle_category",
    "toggle_one",
]
