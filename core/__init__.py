"""core/ -- Kernel layer: settings, errors, database engine, Brevo client.

core/ has no reverse dependencies on api/, auth/, or contact/.
"""
