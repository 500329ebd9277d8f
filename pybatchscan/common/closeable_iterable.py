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
from typing import Callable, Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar('T')
R = TypeVar('R')


class CloseableIterable(Generic[T]):
    """
    An iterable backed by a resource that must be released once iteration is done,
    whether or not it ran to the end. Use it as a context manager.
    """

    def __init__(self, iterable: Iterable[T], closer: Optional[Callable[[], None]] = None):
        self._iterable = iterable
        self._closer = closer
        self._closed = False

    @staticmethod
    def empty() -> 'CloseableIterable':
        return CloseableIterable([])

    @staticmethod
    def with_no_op_close(iterable: Iterable[T]) -> 'CloseableIterable[T]':
        return CloseableIterable(iterable)

    def transform(self, fn: Callable[[T], R]) -> 'CloseableIterable[R]':
        return CloseableIterable((fn(item) for item in self._iterable), self.close)

    def __iter__(self) -> Iterator[T]:
        if self._closed:
            raise ValueError("Cannot iterate a closed iterable")
        return iter(self._iterable)

    def close(self):
        if self._closed:
            return
        self._closed = True
        if self._closer is not None:
            self._closer()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
