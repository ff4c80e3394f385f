# Supabase tables: workflow_definitions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

workflow_definitions:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- is_reusable: boolean (not null, default: false)
- nodes: jsonb (not null, default: '[]') - canvas nodes, see graph.py for the shape
- edges: jsonb (not null, default: '[]') - canvas edges
- viewport: jsonb (nullable) - {"x": 0, "y": 0, "zoom": 1}
- created_by: uuid (foreign key to profiles.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

The graph is stored as an opaque blob. Publishing copies it into a workflows
row plus ordered workflow_steps; later edits to the definition do not touch
already published workflows.
"""
