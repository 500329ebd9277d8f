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
import threading
from typing import Callable, Generic, TypeVar

T = TypeVar('T')

_UNSET = object()


class Lazy(Generic[T]):
    """
    Thread safe compute-once cell. The supplier runs at most once successfully; when it
    raises, the error propagates and the next get() tries again.
    """

    def __init__(self, supplier: Callable[[], T]):
        self._supplier = supplier
        self._value = _UNSET
        self._lock = threading.Lock()

    def get(self) -> T:
        value = self._value
        if value is not _UNSET:
            return value
        with self._lock:
            if self._value is _UNSET:
                self._value = self._supplier()
            return self._value

    def is_initialized(self) -> bool:
        return self._value is not _UNSET
