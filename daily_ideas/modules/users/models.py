# Supabase table: users
# Rows are created on first sign-in by the auth flow; this service only reads them.

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, same as auth.users.id)
- email: text (not null)
- name: text (not null)
- avatar_url: text (nullable)
- created_at: timestamp (default: now())
"""
