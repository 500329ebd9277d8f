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

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional

from pybatchscan.common.file_io import InputFile


@dataclass(frozen=True)
class EncryptedInputFile:
    """An input file whose content may be encrypted, paired with the key metadata to unwrap it."""

    encrypted_input_file: InputFile
    key_metadata: Optional[bytes] = None

    def location(self) -> str:
        return self.encrypted_input_file.location()


class EncryptionManager(ABC):
    """
    Turns encrypted files into readable ones. Implementations travel to worker processes
    inside read tasks, so they must be picklable.
    """

    @abstractmethod
    def decrypt(self, encrypted_files: Iterable[EncryptedInputFile]) -> Iterable[InputFile]:
        """
        Decrypts a batch of files at once. Every returned file keeps the location of the
        encrypted file it was produced from.
        """
