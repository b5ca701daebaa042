"""
Tenant-scoped read queries

Every query filters by tenant_id explicitly. Nothing here commits; the
service layer owns the transaction.
"""
