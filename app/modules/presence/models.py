# Supabase tables: user_presence
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_presence:
- id: uuid (primary key)
- user_id: uuid (unique, foreign key to profiles.id, not null)
- is_online: boolean (not null, default: false)
- last_seen: timestamp (not null, default: now())
- session_id: text (nullable)
- updated_at: timestamp (default: now())

Clients heartbeat periodically; rows whose last_seen is older than the
presence timeout are flipped offline by the sweeper.
"""
