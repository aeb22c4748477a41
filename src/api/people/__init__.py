"""People bounded context.

Loads a tenant's people page by page together with their enrollments,
documents and tasks, and drives the staged dashboard load.
"""
