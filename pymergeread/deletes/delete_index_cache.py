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
from concurrent.futures import Future
from typing import Callable, Dict, Hashable

from cachetools import LRUCache
from readerwriterlock import rwlock

from pymergeread.deletes.delete_index import DeleteIndex

logger = logging.getLogger(__name__)


class DeleteIndexCache:
    """
    A bounded LRU cache of parsed delete files shared by concurrent scan tasks.

    Every key is built at most once at a time: the first caller missing a key builds the
    index, concurrent callers of the same key wait on the same Future. A failed build is not
    cached and every caller waiting on it receives the same exception.
    """

    def __init__(self, max_entries: int = 128):
        self._indexes = LRUCache(max_entries)
        self._pending: Dict[Hashable, Future] = {}
        self._lock = rwlock.RWLockFair()

    def get_or_load(self, key: Hashable, loader: Callable[[], DeleteIndex]) -> DeleteIndex:
        rlock = self._lock.gen_rlock()
        rlock.acquire()
        try:
            index = self._indexes.get(key)
            if index is not None:
                logger.debug("Delete index cache hit for %s", key)
                return index
        finally:
            rlock.release()

        wlock = self._lock.gen_wlock()
        wlock.acquire()
        try:
            index = self._indexes.get(key)
            if index is not None:
                return index
            future = self._pending.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._pending[key] = future
        finally:
            wlock.release()

        if not owner:
            logger.debug("Waiting for concurrent build of delete index %s", key)
            return future.result()
        return self._build(key, loader, future)

    def _build(self, key: Hashable, loader: Callable[[], DeleteIndex], future: Future) -> DeleteIndex:
        try:
            index = loader()
        except BaseException as e:
            self._remove_pending(key)
            future.set_exception(e)
            raise

        wlock = self._lock.gen_wlock()
        wlock.acquire()
        try:
            self._indexes[key] = index
            del self._pending[key]
        finally:
            wlock.release()
        future.set_result(index)
        return index

    def _remove_pending(self, key: Hashable) -> None:
        wlock = self._lock.gen_wlock()
        wlock.acquire()
        try:
            self._pending.pop(key, None)
        finally:
            wlock.release()

    def invalidate(self, key: Hashable) -> None:
        wlock = self._lock.gen_wlock()
        wlock.acquire()
        try:
            self._indexes.pop(key, None)
        finally:
            wlock.release()

    def clear_cache(self) -> None:
        wlock = self._lock.gen_wlock()
        wlock.acquire()
        try:
            self._indexes.clear()
        finally:
            wlock.release()

    def get_cache_size(self) -> int:
        rlock = self._lock.gen_rlock()
        rlock.acquire()
        try:
            return len(self._indexes)
        finally:
            rlock.release()

    def __contains__(self, key: Hashable) -> bool:
        # membership does not touch the LRU order
        rlock = self._lock.gen_rlock()
        rlock.acquire()
        try:
            return key in self._indexes
        finally:
            rlock.release()
