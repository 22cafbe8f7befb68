# Supabase table: public.profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id on delete cascade)
- name: text (not null)
- email: text (not null) - copied from auth.users at registration
- address: text (not null)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now(), maintained by update_profiles_updated_at)

Rows are created by the on_auth_user_created trigger (name defaults to
"Unknown", address to ""). Readable and updatable by the owning user,
readable, insertable and updatable by system_admin.
"""
