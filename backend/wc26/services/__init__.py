"""
Services Layer

Pure bracket logic that:
- Accepts domain inputs (group ids, team-name maps, tables)
- Returns domain outputs (templates, matchups, diagnostics)
- Does NOT depend on HTTP request/response objects
- Does NOT mutate its inputs or the loaded combination table
"""
