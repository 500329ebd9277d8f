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
from typing import Iterable, List

from pybatchscan.common.file_io import InputFile
from pybatchscan.encryption.encryption_manager import EncryptedInputFile, EncryptionManager

logger = logging.getLogger(__name__)


class PlaintextEncryptionManager(EncryptionManager):
    """Encryption manager for tables stored without encryption: files pass through unchanged."""

    def decrypt(self, encrypted_files: Iterable[EncryptedInputFile]) -> Iterable[InputFile]:
        decrypted: List[InputFile] = []
        for encrypted in encrypted_files:
            if encrypted.key_metadata:
                logger.warning("File %s has key metadata but is read as plaintext", encrypted.location())
            decrypted.append(encrypted.encrypted_input_file)
        return decrypted
