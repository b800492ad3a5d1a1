"""Permission catalog and role resolution.

The catalog is the full set of permission and role records supplied by the
server for one session. It is built once, never patched; a role change or a
new login produces a new catalog object.
"""

from dataclasses import replace
from types import MappingProxyType
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Tuple

from storegate.common.logger import get_logger

from .codec import ActionListCodec, decode_actions
from .errors import CatalogLoadError
from .models import Permission, Role, User
from .signals import DanglingRoleReference, SignalHandler

logger = get_logger("catalog")


class PermissionCatalog:
    """Immutable set of permissions and roles for one session.

    Invariants:
    - permission names are unique across the catalog
    - every role's permissions are a subset of the catalog's permissions
    """

    def __init__(
        self,
        permissions: Iterable[Permission],
        roles: Iterable[Role] = (),
        *,
        malformed: Iterable[str] = (),
    ):
        ordered: List[Permission] = []
        by_name: Dict[str, Permission] = {}
        for perm in permissions:
            if perm.name in by_name:
                raise CatalogLoadError(
                    f"Duplicate permission name in catalog: {perm.name}",
                    permission_name=perm.name,
                )
            by_name[perm.name] = perm
            ordered.append(perm)

        role_map: Dict[Hashable, Role] = {}
        for role in roles:
            if role.id in role_map:
                raise CatalogLoadError(f"Duplicate role id in catalog: {role.id!r}")
            role_map[role.id] = self._bind_role(role, by_name)

        self._permissions: Tuple[Permission, ...] = tuple(ordered)
        self._by_name = MappingProxyType(by_name)
        self._position = MappingProxyType({p.name: i for i, p in enumerate(ordered)})
        self._roles = MappingProxyType(role_map)
        self._malformed = frozenset(malformed)

    @staticmethod
    def _bind_role(role: Role, by_name: Mapping[str, Permission]) -> Role:
        """Point a role at the catalog's permission objects, dropping strays."""
        bound: List[Permission] = []
        for perm in role.permissions:
            catalog_perm = by_name.get(perm.name)
            if catalog_perm is None:
                logger.warning(
                    f"Role {role.name!r} references permission {perm.name!r} "
                    f"which is not in the catalog; ignoring it"
                )
                continue
            if catalog_perm not in bound:
                bound.append(catalog_perm)
        return replace(role, permissions=tuple(bound))

    @property
    def permissions(self) -> Tuple[Permission, ...]:
        """All permissions in catalog order."""
        return self._permissions

    @property
    def roles(self) -> Mapping[Hashable, Role]:
        return self._roles

    @property
    def malformed(self) -> frozenset:
        """Names of permissions whose action list failed to decode."""
        return self._malformed

    def get_permission(self, name: str) -> Optional[Permission]:
        return self._by_name.get(name)

    def get_role(self, role_id: Hashable) -> Optional[Role]:
        try:
            return self._roles.get(role_id)
        except TypeError:
            # Unhashable id never matches
            return None

    def in_catalog_order(self, permissions: Iterable[Permission]) -> Tuple[Permission, ...]:
        """Sort permissions by their position in the catalog."""
        return tuple(sorted(permissions, key=lambda p: self._position[p.name]))

    def __len__(self) -> int:
        return len(self._permissions)

    def __repr__(self) -> str:
        return f"<PermissionCatalog permissions={len(self._permissions)} roles={len(self._roles)}>"

    @classmethod
    def from_records(
        cls,
        permissions: Optional[Iterable[Mapping[str, Any]]],
        roles: Iterable[Mapping[str, Any]] = (),
        *,
        codec: Optional[ActionListCodec] = None,
        on_signal: Optional[SignalHandler] = None,
    ) -> "PermissionCatalog":
        """Build a catalog from server records with encoded action lists.

        Args:
            permissions: Permission records (``id, name, module, description,
                category, actions``). When ``None`` the catalog is assembled
                from the permission records embedded in the roles, in order
                of first appearance.
            roles: Role records (``id, name, description, permissions``); each
                permission entry is either a permission name or a record
            codec: Action-list codec (JSON arrays by default)
            on_signal: Receives MalformedActionList records

        Raises:
            CatalogLoadError: On duplicate names, records missing a name or
                records whose module is not a string
        """
        malformed: List[str] = []

        def _signal(sig):
            malformed.append(sig.permission_name)
            if on_signal is not None:
                on_signal(sig)

        def _permission(record: Mapping[str, Any]) -> Permission:
            name = record.get("name")
            if not isinstance(name, str) or not name:
                raise CatalogLoadError(f"Permission record without a name: {record!r}")
            module = record.get("module") or ""
            if not isinstance(module, str):
                raise CatalogLoadError(
                    f"Permission {name} has a non-string module: {module!r}",
                    permission_name=name,
                )
            actions = decode_actions(
                record.get("actions"),
                permission_name=name,
                codec=codec,
                on_signal=_signal,
            )
            return Permission(
                id=record.get("id", name),
                name=name,
                module=module,
                description=record.get("description") or "",
                actions=actions,
                category=record.get("category") or "",
            )

        role_records = list(roles)
        catalog_perms: List[Permission] = []
        by_name: Dict[str, Permission] = {}

        if permissions is not None:
            for record in permissions:
                perm = _permission(record)
                if perm.name in by_name:
                    raise CatalogLoadError(
                        f"Duplicate permission name in catalog: {perm.name}",
                        permission_name=perm.name,
                    )
                by_name[perm.name] = perm
                catalog_perms.append(perm)
        else:
            for role_record in role_records:
                for entry in role_record.get("permissions") or ():
                    if isinstance(entry, Mapping) and entry.get("name") not in by_name:
                        perm = _permission(entry)
                        by_name[perm.name] = perm
                        catalog_perms.append(perm)

        built_roles: List[Role] = []
        for role_record in role_records:
            role_perms: List[Permission] = []
            for entry in role_record.get("permissions") or ():
                name = entry.get("name") if isinstance(entry, Mapping) else entry
                perm = by_name.get(name) if isinstance(name, str) else None
                if perm is None:
                    logger.warning(
                        f"Role {role_record.get('name')!r} references unknown "
                        f"permission {name!r}; ignoring it"
                    )
                    continue
                role_perms.append(perm)
            built_roles.append(
                Role(
                    id=role_record.get("id"),
                    name=role_record.get("name") or "",
                    description=role_record.get("description") or "",
                    permissions=tuple(role_perms),
                )
            )

        return cls(catalog_perms, built_roles, malformed=malformed)


EMPTY_CATALOG = PermissionCatalog(())


class RoleResolver:
    """Resolves the ordered permission list a user's role grants."""

    def __init__(self, catalog: PermissionCatalog, *, on_signal: Optional[SignalHandler] = None):
        self.catalog = catalog
        self.on_signal = on_signal

    def resolve(self, user: Optional[User]) -> Tuple[Permission, ...]:
        """Return the user's permissions in catalog order.

        An empty tuple is a normal, fully-resolved answer: no user, no role,
        an inactive user or a role without permissions. A role id that
        matches no loaded role also yields an empty tuple and emits
        DanglingRoleReference.
        """
        if user is None or user.role_id is None:
            return ()
        if not user.is_active:
            logger.info(f"User {user.id!r} is inactive; resolving to no permissions")
            return ()

        role = self.catalog.get_role(user.role_id)
        if role is None:
            logger.warning(
                f"User {user.id!r} references role {user.role_id!r} "
                f"which is not loaded; resolving to no permissions"
            )
            if self.on_signal is not None:
                self.on_signal(DanglingRoleReference(user_id=user.id, role_id=user.role_id))
            return ()

        return self.catalog.in_catalog_order(role.permissions)
