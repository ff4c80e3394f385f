# Supabase tables: workspaces
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

workspaces:
- id: uuid (primary key)
- name: text (not null)
- slug: text (unique, not null)
- description: text (nullable)
- owner_id: uuid (foreign key to profiles.id, nullable)
- settings: jsonb (default: '{}')
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Membership is profiles.workspace_id; a profile belongs to at most one workspace.
"""
