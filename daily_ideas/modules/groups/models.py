# Supabase tables: groups, group_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

groups:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- owner_id: uuid (foreign key to users.id, not null)
- invite_code: text (not null, unique) - 6 uppercase alphanumerics
- color: text (not null, default: '#3B82F6')
- member_count: integer (not null, default: 1)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

group_members:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, not null)
- user_id: uuid (foreign key to users.id, not null)
- role: text (not null, default: 'member') - values: owner, admin, member
- joined_at: timestamp (default: now())
- unique constraint on (group_id, user_id)
"""
