"""Gate pass system package.

Front-desk visitor passes for a single facility: issue, validate, renew and
close passes, VIP fast-path issuance, and admin listings/analytics.

The package is organized by feature modules (passes, visitors, vip,
analytics, ...) with a thin Flask controller layer over service/repository
layers.
"""

__version__ = "1.0.0"
