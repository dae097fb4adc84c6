# Supabase table: barbers
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

barbers:
- id: uuid (primary key, default: gen_random_uuid())
- title: text (not null)
- caption: text (not null)
- rating: integer (not null, 1-5)
- image: text (not null) - public URL of the uploaded image in the S3 bucket
- user_id: uuid (not null, references users.id on delete cascade) - owner, never updated
- created_at: timestamptz (default: now())

Index on created_at desc backs the newest-first listing; index on user_id
backs GET /barbers/user.
"""

BARBERS_TABLE = "barbers"

# Owner expanded to a partial profile for the public feed
BARBER_LIST_COLUMNS = "id, title, caption, rating, image, created_at, user:users(id, username, profile_image)"
