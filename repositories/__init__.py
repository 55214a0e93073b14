"""
repositories/ - Data Access Layer
==================================
Each repository encapsulates all SQL for one table and returns domain
model objects. Repositories receive a shared ``db.Database`` and run every
statement through it, so the schema is guaranteed to exist first.
"""
