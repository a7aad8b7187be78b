"""authcore: authorization and capability-encoding core.

Permission catalog and single-character codec, local and remote permission
evaluation, tri-state category selection and the transfer-route policy matrix.
"""

__version__ = "1.0.0"
