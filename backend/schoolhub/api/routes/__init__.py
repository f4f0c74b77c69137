"""Route Modules: one file per resource.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Reads depend on get_current_session, mutations on require_admin; the
      admin rosters (students, linkable children) are admin-only reads
    - Every entity lookup goes through a scoping predicate (services/scoping.py)
"""
