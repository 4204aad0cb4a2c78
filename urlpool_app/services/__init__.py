"""
Business logic for the URL pool: shard counter, sampler, validation
and the service that ties them together.
"""

from .url_pool_service import URLPoolService

__all__ = ["URLPoolService"]
