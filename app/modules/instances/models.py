# Supabase tables: workflow_instances
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

workflow_instances:
- id: uuid (primary key)
- workflow_id: uuid (foreign key to workflows.id, not null)
- started_by: uuid (foreign key to profiles.id, not null)
- current_step_id: uuid (foreign key to workflow_steps.id, nullable) - null once completed or cancelled
- status: text (not null, default: 'active') - values: active, completed, cancelled, paused
- start_data: jsonb (default: '{}')
- completed_at: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

The pointer only moves through a conditional update
(... where id = :id and current_step_id = :completed_step_id and status = 'active'),
so two completions of the same step cannot both advance the instance.
"""
