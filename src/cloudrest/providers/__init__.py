"""Provider implementations for cloud services.

Each provider module exports a `Provider` class alias for the main provider class,
along with its credentials and params types.

Available providers:
- file_share: file-share data plane (shares, service properties)
- workloads: workloads resource provider (monitors)
"""

from cloudrest.providers import file_share, workloads

__all__ = [
    "file_share",
    "workloads",
]
