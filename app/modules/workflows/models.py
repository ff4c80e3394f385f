# Supabase tables: workflows, workflow_steps, workflow_comments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

workflows:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- status: text (not null, default: 'draft') - values: draft, active, paused, completed, archived
- priority: text (not null, default: 'medium') - values: low, medium, high, urgent
- is_reusable: boolean (not null, default: false) - false means at most one instance may ever be started
- assigned_to: uuid (foreign key to profiles.id, nullable)
- due_date: timestamp (nullable)
- tags: text[] (default: '{}')
- metadata: jsonb (default: '{}') - publish stores {"definition_id": ...} here
- created_by: uuid (foreign key to profiles.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

workflow_steps:
- id: uuid (primary key)
- workflow_id: uuid (foreign key to workflows.id, not null)
- name: text (not null)
- description: text (nullable)
- step_order: integer (not null) - 1-based, contiguous after a save
- status: text (not null, default: 'pending') - values: pending, in_progress, completed, blocked, cancelled
- assigned_to: uuid (foreign key to profiles.id, nullable)
- estimated_hours: numeric (nullable)
- actual_hours: numeric (nullable)
- dependencies: uuid[] (default: '{}')
- metadata: jsonb (default: '{}') - builder node id and step type after publish
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

workflow_comments:
- id: uuid (primary key)
- workflow_id: uuid (foreign key to workflows.id, not null)
- user_id: uuid (foreign key to profiles.id, nullable) - null for system entries
- comment: text (not null)
- created_at: timestamp (default: now())

Deletes are cascaded by the application, children first:
notifications -> workflow_step_assignments -> workflow_comments -> workflow_instances -> workflow_steps -> workflows
"""
