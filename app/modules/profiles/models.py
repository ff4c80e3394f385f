# Supabase tables: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, foreign key to auth.users.id, on delete cascade)
- email: text (not null)
- first_name: text (nullable)
- last_name: text (nullable)
- role: text (not null, default: 'employee') - values: root, admin, manager, employee
- department: text (nullable)
- avatar_url: text (nullable)
- workspace_id: uuid (foreign key to workspaces.id, nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Rows are created by the on-signup trigger and removed when the auth user is deleted.
A database trigger also refuses deletion of root profiles.
"""
