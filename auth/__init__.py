"""auth/ -- Admin authentication package for the portfolio backend.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or contact/.
api/ imports from auth/, not the other way around.
"""
