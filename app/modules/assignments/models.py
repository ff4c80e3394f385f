# Supabase tables: workflow_step_assignments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

workflow_step_assignments:
- id: uuid (primary key)
- workflow_step_id: uuid (foreign key to workflow_steps.id, not null)
- assigned_to: uuid (foreign key to profiles.id, not null)
- assigned_by: uuid (foreign key to profiles.id, nullable)
- status: text (not null, default: 'pending') - values: pending, in_progress, completed, blocked, cancelled
- notes: text (nullable)
- due_date: timestamp (nullable)
- completed_at: timestamp (nullable) - set when status becomes completed
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

An assignment's status is tracked separately from workflow_steps.status.
"""
