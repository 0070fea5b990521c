"""
Business services.

Plain async functions over an ``AsyncSession``. Services flush but leave the
commit to the caller, and raise ``bidchemz_logistics.core.errors`` exceptions
for rule violations.
"""
