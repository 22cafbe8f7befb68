# Supabase table: public.ratings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

ratings:
- id: uuid (primary key, default gen_random_uuid())
- user_id: uuid (references auth.users.id on delete cascade, not null)
- store_id: uuid (references public.stores.id on delete cascade, not null)
- rating: integer (not null, check 1 <= rating <= 5)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now(), maintained by update_ratings_updated_at)
- unique constraint on (user_id, store_id)

The unique constraint is what guarantees one rating per user per store.
Readable by everyone; inserted, updated and deleted only by the rating's user.
"""
