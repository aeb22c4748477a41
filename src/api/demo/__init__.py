"""Demo bounded context.

Creates demo tenants and fills them with synthetic people, enrollments,
documents and tasks at scale, in resumable fixed-size batches.
"""
