"""
GCG Document Hub
HTTP blueprints, one per resource, plus the shared error handlers.
"""
