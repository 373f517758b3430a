"""Authentication and authorization.

Learn: Cookie sessions identify the caller. Each request resolves its
session once into an immutable IdentityContext (user id + roles), and
every data operation is checked against it:

1. Guards: pure predicates (authenticated? has role? self or role?)
2. Owner-scoped services: refuse construction without an identity and
   conjoin owner_id == caller to every query
"""
