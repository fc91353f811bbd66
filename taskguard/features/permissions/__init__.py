"""
Permission management feature module.

Roles carry a list of action/entity/access grants. Route guards and the
permission check endpoints delegate every decision to taskguard.core.rbac.
"""
