# Supabase table: ideas

"""
Expected Supabase table structure:

ideas:
- id: uuid (primary key)
- text: text (not null)
- description: text (nullable)
- category_id: uuid (foreign key to categories.id, nullable) - null means "no category"
- priority: boolean (not null, default: false)
- completed: boolean (not null, default: false)
- created_at: timestamp (default: now())
- completed_at: timestamp (nullable) - set exactly when completed is true
- sort_order: bigint (not null) - millisecond order key, strictly increasing per group
- group_id: uuid (foreign key to groups.id, not null)
- created_by: uuid (foreign key to users.id, not null)
- updated_at: timestamp (nullable)
"""
