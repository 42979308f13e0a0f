"""contact/ -- Contact-form submissions: persistence and forwarding to Brevo.

Layer rule: contact/ imports only stdlib, third-party libraries, and core/.
It is independent of auth/.
"""
