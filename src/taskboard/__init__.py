"""Taskboard: session-authenticated GraphQL API for users, projects and tasks.

Every project and task belongs to exactly one user. All reads and writes
on them are scoped to the authenticated caller; relation fields on lists
are batched per request.
"""

__version__ = "0.1.0"
