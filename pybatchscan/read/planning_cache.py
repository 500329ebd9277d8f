################################################################################
#  Licensed to the Apache Software Foundation (ASF) under one
#  or more contributor license agreements.  See the NOTICE file
#  distributed with this work for additional information
#  regarding copyright ownership.  The ASF licenses this file
#  to you under the Apache License, Version 2.0 (the
#  "License"); you may not use this file except in compliance
#  with the License.  You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
# limitations under the License.
################################################################################

import logging
import threading
from typing import Callable, Dict, List, Optional

from cachetools import LRUCache
from readerwriterlock import rwlock

from pybatchscan.read.cache_key import CacheKey
from pybatchscan.read.scan_task import CombinedScanTask

logger = logging.getLogger(__name__)

DEFAULT_MAX_CACHED_TASKS = 100_000


def _task_count(task_groups: List[CombinedScanTask]) -> int:
    return max(1, sum(len(group) for group in task_groups))


class _KeyLock:

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class _TaskGroupsCache(LRUCache):

    def popitem(self):
        key, task_groups = super().popitem()
        logger.debug("Evicted %d planned task groups of %s", len(task_groups), key.table_identity)
        return key, task_groups


class PlanningCache:
    """
    Process wide cache of planned task groups. Entries are evicted least recently used first once
    the cached task count exceeds the bound; values are never invalidated explicitly.

    At most one planning runs at a time for a key: concurrent callers of the same key wait for it
    and receive the same list. Callers of different keys plan concurrently.
    """

    def __init__(self, max_tasks: int = DEFAULT_MAX_CACHED_TASKS):
        self._cache = _TaskGroupsCache(maxsize=max_tasks, getsizeof=_task_count)
        self._cache_lock = rwlock.RWLockFair()
        self._key_locks: Dict[CacheKey, _KeyLock] = {}
        self._key_locks_lock = threading.Lock()

    def get(self, key: CacheKey,
            loader: Callable[[CacheKey], List[CombinedScanTask]]) -> List[CombinedScanTask]:
        task_groups = self.get_if_present(key)
        if task_groups is not None:
            return task_groups

        key_lock = self._acquire_key_lock(key)
        try:
            with key_lock.lock:
                task_groups = self.get_if_present(key)
                if task_groups is not None:
                    return task_groups
                task_groups = loader(key)
                self._put(key, task_groups)
                return task_groups
        finally:
            self._release_key_lock(key, key_lock)

    def get_if_present(self, key: CacheKey) -> Optional[List[CombinedScanTask]]:
        read_lock = self._cache_lock.gen_rlock()
        read_lock.acquire()
        try:
            return self._cache.get(key)
        finally:
            read_lock.release()

    def _put(self, key: CacheKey, task_groups: List[CombinedScanTask]):
        write_lock = self._cache_lock.gen_wlock()
        write_lock.acquire()
        try:
            self._cache[key] = task_groups
        except ValueError:
            logger.debug("Not caching %d tasks of %s, more than the cache can hold",
                         _task_count(task_groups), key.table_identity)
        finally:
            write_lock.release()

    def _acquire_key_lock(self, key: CacheKey) -> _KeyLock:
        with self._key_locks_lock:
            key_lock = self._key_locks.get(key)
            if key_lock is None:
                key_lock = self._key_locks[key] = _KeyLock()
            key_lock.users += 1
            return key_lock

    def _release_key_lock(self, key: CacheKey, key_lock: _KeyLock):
        # the lock stays registered while a caller still holds or waits on it
        with self._key_locks_lock:
            key_lock.users -= 1
            if key_lock.users == 0:
                del self._key_locks[key]

    def clear(self):
        write_lock = self._cache_lock.gen_wlock()
        write_lock.acquire()
        try:
            self._cache.clear()
        finally:
            write_lock.release()

    def __len__(self) -> int:
        return len(self._cache)

    def current_size(self) -> int:
        """The number of cached tasks."""
        return self._cache.currsize


PLANNING_CACHE = PlanningCache()
