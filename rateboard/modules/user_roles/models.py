# Supabase table: public.user_roles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

app_role enum: 'system_admin' | 'normal_user' | 'store_owner'

user_roles:
- id: uuid (primary key, default gen_random_uuid())
- user_id: uuid (references auth.users.id on delete cascade, not null)
- role: app_role (not null)
- created_at: timestamptz (default: now())
- unique constraint on (user_id, role)

The constraint allows several roles per user. The effective role is
resolved by precedence (system_admin > store_owner > normal_user), see
rateboard.core.policies.ROLE_PRECEDENCE.
"""
