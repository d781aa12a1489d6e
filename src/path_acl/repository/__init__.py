"""Policy repositories.

All classes satisfy path_acl.pdp.protocol.PolicyRepository and can be
handed to PolicyRegistry or AccessManager.

Structure:
    memory.py   - InMemoryRepository
    files.py    - JsonRepository, YamlRepository (single file or per-file directory)
    chained.py  - ChainedRepository (first match wins)
    cached.py   - CachedRepository (TTL cache in front of another repository)
"""

from path_acl.repository.cached import CachedRepository
from path_acl.repository.chained import ChainedRepository
from path_acl.repository.files import JsonRepository, YamlRepository
from path_acl.repository.memory import InMemoryRepository

__all__ = [
    "CachedRepository",
    "ChainedRepository",
    "InMemoryRepository",
    "JsonRepository",
    "YamlRepository",
]
