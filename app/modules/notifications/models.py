# Supabase tables: notifications
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

notifications:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null) - recipient
- title: text (not null)
- message: text (not null)
- type: text (not null, default: 'info') - values: info, warning, success, error
- read: boolean (not null, default: false)
- workflow_step_id: uuid (foreign key to workflow_steps.id, nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Inserts are broadcast over Supabase Realtime (postgres_changes) to the recipient.
"""
