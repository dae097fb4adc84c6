# Supabase tables: users, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Passwords, sessions and JWTs live in auth.users, managed by Supabase Auth

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, references auth.users.id on delete cascade)
- email: text (unique, not null)
- username: text (unique, not null)
- profile_image: text (nullable) - avatar URL, generated from the username at sign-up
- created_at: timestamptz (default: now())

The barbers listing embeds a projection of this table
(`user:users(id, username, profile_image)`), so barbers.user_id must carry a
foreign key to users.id for PostgREST to resolve the relationship.
"""

DEFAULT_AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={username}"
