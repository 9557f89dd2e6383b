"""Rate limiting adapters.

Login throttling depends on the interface in ``base`` so the per-process map
can later be replaced by a shared store without touching the auth service.
"""
