# Supabase table: categories

"""
Expected Supabase table structure:

categories:
- id: uuid (primary key)
- name: text (not null)
- color: text (not null)
- icon: text (nullable)
- sort_order: bigint (not null) - millisecond order key, 0 for the default category
- is_default: boolean (not null, default: false) - one per group, never deleted
- group_id: uuid (foreign key to groups.id, not null)
- created_by: uuid (foreign key to users.id, not null)
- created_at: timestamp (default: now())
"""
