from supabase import Client
from app.core.utils import utc_now_iso
from app.modules.feature_modules.dependency import (
    ModuleDependencyError, activation_order, build_graph, deactivation_order,
    find_conflicts, missing_dependencies
)
from app.modules.feature_modules.schemas import (
    ModuleResponse, ModuleAccessInfo, ModuleChangeResponse, ModuleConflict,
    ModuleConflictsResponse, ModuleAuditLogResponse
)
from typing import List, Optional, Dict, Set
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

CORE_MODULE = "neura-core"


class ModuleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _catalog(self) -> List[dict]:
        result = self.supabase.table("modules")\
            .select("*")\
            .order("display_name")\
            .execute()
        return result.data or []

    def _workspace_rows(self, workspace_id: str) -> Dict[str, dict]:
        """workspace_modules rows keyed by module_id"""
        result = self.supabase.table("workspace_modules")\
            .select("*")\
            .eq("workspace_id", workspace_id)\
            .execute()
        return {row["module_id"]: row for row in result.data or []}

    def _active_names(self, catalog: List[dict], rows: Dict[str, dict]) -> Set[str]:
        return {m["name"] for m in catalog if rows.get(m["id"], {}).get("is_active")}

    def _ensure_workspace(self, workspace_id: str) -> None:
        result = self.supabase.table("workspaces")\
            .select("id")\
            .eq("id", workspace_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Workspace not found")

    def list_catalog(self) -> List[ModuleResponse]:
        try:
            return [ModuleResponse(**m) for m in self._catalog()]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def active_module_names(self, workspace_id: Optional[str]) -> Set[str]:
        if not workspace_id:
            return set()
        return self._active_names(self._catalog(), self._workspace_rows(workspace_id))

    def can_access_module(self, profile: dict, module_name: str) -> bool:
        """Root reaches everything, the core module is open to all, others need activation"""
        if profile.get("role") == "root":
            return True
        if module_name == CORE_MODULE:
            return True
        return module_name in self.active_module_names(profile.get("workspace_id"))

    def get_access_info(self, workspace_id: str) -> List[ModuleAccessInfo]:
        """Per-module activation and dependency status for a workspace"""
        try:
            catalog = self._catalog()
            rows = self._workspace_rows(workspace_id)
            graph = build_graph(catalog)
            active = self._active_names(catalog, rows)

            info = []
            for module in catalog:
                row = rows.get(module["id"], {})
                missing = missing_dependencies(module["name"], graph, active)
                info.append(ModuleAccessInfo(
                    module_name=module["name"],
                    display_name=module["display_name"],
                    is_active=module["name"] in active,
                    is_available=True,
                    has_dependencies=not missing,
                    missing_dependencies=missing,
                    version=row.get("version") or module.get("version") or "1.0.0",
                    settings=row.get("settings") or {},
                ))
            return info
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _write_state(self, workspace_id: str, module: dict, row: dict, is_active: bool,
                     user_id: str, reason: Optional[str]) -> None:
        action = "activate" if is_active else "deactivate"
        self.supabase.table("workspace_modules").upsert({
            "workspace_id": workspace_id,
            "module_id": module["id"],
            "is_active": is_active,
            "version": row.get("version") or module.get("version"),
            "activated_by": user_id,
            "activated_at": utc_now_iso() if is_active else None,
        }, on_conflict="workspace_id,module_id").execute()

        self.supabase.table("module_audit_logs").insert({
            "workspace_id": workspace_id,
            "module_name": module["name"],
            "action": action,
            "previous_state": {"is_active": bool(row.get("is_active"))},
            "new_state": {"is_active": is_active},
            "performed_by": user_id,
            "reason": reason,
        }).execute()
        logger.info(f"Module {module['name']} {action}d in workspace {workspace_id} by {user_id}")

    def activate_modules(self, workspace_id: str, names: List[str], user_id: str,
                         reason: Optional[str] = None) -> ModuleChangeResponse:
        """Activate modules in dependency order; requirements must be active or part of the request"""
        try:
            self._ensure_workspace(workspace_id)
            catalog = self._catalog()
            by_name = {m["name"]: m for m in catalog}
            rows = self._workspace_rows(workspace_id)
            active = self._active_names(catalog, rows)

            try:
                order = activation_order(names, build_graph(catalog), active)
            except ModuleDependencyError as e:
                raise HTTPException(status_code=e.status_code, detail=str(e))

            for name in order:
                module = by_name[name]
                self._write_state(workspace_id, module, rows.get(module["id"], {}), True, user_id, reason)
                active.add(name)

            return ModuleChangeResponse(workspace_id=workspace_id, changed=order, active_modules=sorted(active))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def deactivate_modules(self, workspace_id: str, names: List[str], user_id: str,
                           cascade: bool = False, reason: Optional[str] = None) -> ModuleChangeResponse:
        """Deactivate modules dependents first; active dependents need cascade=True"""
        try:
            self._ensure_workspace(workspace_id)
            catalog = self._catalog()
            by_name = {m["name"]: m for m in catalog}
            rows = self._workspace_rows(workspace_id)
            active = self._active_names(catalog, rows)

            core = sorted(n for n in names if by_name.get(n, {}).get("is_core") or n == CORE_MODULE)
            if core:
                raise HTTPException(status_code=400, detail=f"Core modules cannot be deactivated: {', '.join(core)}")

            try:
                order = deactivation_order(names, build_graph(catalog), active, cascade=cascade)
            except ModuleDependencyError as e:
                raise HTTPException(status_code=e.status_code, detail=str(e))

            for name in order:
                module = by_name[name]
                entry_reason = reason
                if name not in names:
                    entry_reason = f"Cascade deactivation: {reason}" if reason else "Cascade deactivation"
                self._write_state(workspace_id, module, rows.get(module["id"], {}), False, user_id, entry_reason)
                active.discard(name)

            return ModuleChangeResponse(workspace_id=workspace_id, changed=order, active_modules=sorted(active))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_conflicts(self, workspace_id: str, names: List[str]) -> ModuleConflictsResponse:
        """Active dependents that deactivating the given modules would break"""
        try:
            catalog = self._catalog()
            active = self._active_names(catalog, self._workspace_rows(workspace_id))
            try:
                conflicts = find_conflicts(names, build_graph(catalog), active)
            except ModuleDependencyError as e:
                raise HTTPException(status_code=e.status_code, detail=str(e))
            return ModuleConflictsResponse(
                workspace_id=workspace_id,
                can_safely_deactivate=not conflicts,
                conflicts=[ModuleConflict(module_name=n, required_by=d) for n, d in conflicts.items()],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_audit_logs(self, workspace_id: str, limit: int = 50, offset: int = 0) -> List[ModuleAuditLogResponse]:
        try:
            result = self.supabase.table("module_audit_logs")\
                .select("*")\
                .eq("workspace_id", workspace_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [ModuleAuditLogResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
