# Supabase table: public.stores, view: public.store_ratings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

stores:
- id: uuid (primary key, default gen_random_uuid())
- owner_id: uuid (references auth.users.id on delete cascade, not null)
- name: text (not null)
- email: text (not null)
- address: text (not null)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now(), maintained by update_stores_updated_at)

store_ratings (view, not stored):
- id, name, email, address, owner_id: copied from stores
- average_rating: numeric - AVG(ratings.rating), 0 when the store has no ratings
- total_ratings: bigint - COUNT(ratings.id)

Every store appears exactly once in store_ratings (LEFT JOIN ratings,
GROUP BY store). The aggregate is recomputed by the database on every
read, so StoreService reads it from the view instead of folding raw
ratings rows.
"""
