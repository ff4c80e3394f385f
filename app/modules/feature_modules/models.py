# Supabase tables: modules, workspace_modules, module_audit_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

modules:
- id: uuid (primary key)
- name: text (unique, not null) - e.g. neura-core, neura-flow, neura-crm, neura-forms, neura-edu
- display_name: text (not null)
- description: text (nullable)
- version: text (not null, default: '1.0.0')
- is_core: boolean (not null, default: false) - core modules are always accessible and never deactivated
- required_modules: text[] (default: '{}') - names of modules that must be active first
- settings_schema: jsonb (default: '{}')
- created_at: timestamp (default: now())

workspace_modules:
- id: uuid (primary key)
- workspace_id: uuid (foreign key to workspaces.id, not null)
- module_id: uuid (foreign key to modules.id, not null)
- is_active: boolean (not null, default: false)
- settings: jsonb (default: '{}')
- version: text (nullable)
- activated_at: timestamp (nullable)
- activated_by: uuid (foreign key to profiles.id, nullable)
- unique (workspace_id, module_id)

module_audit_logs:
- id: uuid (primary key)
- workspace_id: uuid (foreign key to workspaces.id, not null)
- module_name: text (not null)
- action: text (not null) - values: activate, deactivate
- previous_state: jsonb (nullable) - {"is_active": bool}
- new_state: jsonb (nullable) - {"is_active": bool}
- performed_by: uuid (foreign key to profiles.id, nullable)
- reason: text (nullable)
- created_at: timestamp (default: now())
"""
