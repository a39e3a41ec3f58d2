# Supabase table: completions
# One row per "idea of the day"; rows are kept when the idea is reopened later.

"""
Expected Supabase table structure:

completions:
- id: uuid (primary key)
- idea_id: uuid (foreign key to ideas.id, not null)
- date: date (not null) - calendar day, YYYY-MM-DD
- group_id: uuid (foreign key to groups.id, not null)
- completed_by: uuid (foreign key to users.id, not null)
- completed_at: timestamp (default: now())
"""
