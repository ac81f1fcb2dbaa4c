"""Application settings persistence.

Maps a hierarchical application configuration (application, services, tiers,
databases, filesystems) onto a flat, versioned parameter store, keeping
secrets encrypted and never writing an echoed encrypted value back over a
real secret.
"""

__version__ = "0.1.0"
