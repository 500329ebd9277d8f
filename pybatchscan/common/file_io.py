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
import os
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import pyarrow
from packaging.version import parse
from pyarrow.fs import FileSystem, FileType, LocalFileSystem

from pybatchscan.common.options import ConfigOption, Options
from pybatchscan.common.options.config import OssOptions, S3Options

_S3_SCHEMES = {"s3", "s3a", "s3n"}


class InputFile(ABC):
    """A readable file at a location, opened lazily."""

    @abstractmethod
    def location(self) -> str:
        """Fully qualified location of the file."""

    @abstractmethod
    def get_length(self) -> int:
        """Total length of the file in bytes."""

    @abstractmethod
    def new_stream(self):
        """Opens a new seekable binary stream, the caller is responsible for closing it."""


class ArrowInputFile(InputFile):

    def __init__(self, file_io: 'FileIO', location: str, length: Optional[int] = None):
        self.file_io = file_io
        self._location = location
        self._length = length

    def location(self) -> str:
        return self._location

    def get_length(self) -> int:
        if self._length is None:
            self._length = self.file_io.get_file_size(self._location)
        return self._length

    def new_stream(self):
        return self.file_io.new_input_stream(self._location)

    def __repr__(self):
        return f"ArrowInputFile({self._location})"


class FileIO:
    """
    Resolves a pyarrow filesystem from the scheme of a warehouse path and opens files on it.

    A FileIO travels inside read tasks to worker processes, so it pickles without its
    filesystem and rebuilds it on the other side.
    """

    def __init__(self, path: str, options: Optional[Options] = None):
        self.path = path
        self.properties = options if options is not None else Options.from_none()
        self.logger = logging.getLogger(__name__)
        self.filesystem = self._initialize_filesystem(path)

    def _initialize_filesystem(self, path: str) -> FileSystem:
        scheme, _, _ = self.parse_location(path)
        if scheme == "file":
            return LocalFileSystem()
        if scheme == "oss":
            return self._object_store_fs(OssOptions.OSS_ACCESS_KEY_ID, OssOptions.OSS_ACCESS_KEY_SECRET,
                                         OssOptions.OSS_SECURITY_TOKEN, OssOptions.OSS_REGION,
                                         OssOptions.OSS_ENDPOINT)
        if scheme in _S3_SCHEMES:
            return self._object_store_fs(S3Options.S3_ACCESS_KEY_ID, S3Options.S3_ACCESS_KEY_SECRET,
                                         S3Options.S3_SECURITY_TOKEN, S3Options.S3_REGION,
                                         S3Options.S3_ENDPOINT)
        raise ValueError(f"Unrecognized filesystem type in URI: {scheme}")

    @staticmethod
    def parse_location(location: str):
        uri = urlparse(location)
        if not uri.scheme:
            return "file", uri.netloc, os.path.abspath(location)
        return uri.scheme, uri.netloc, f"{uri.netloc}{uri.path}"

    def _object_store_fs(self, access_key: ConfigOption, secret_key: ConfigOption, session_token: ConfigOption,
                         region: ConfigOption, endpoint: ConfigOption) -> FileSystem:
        """An S3 compatible filesystem; OSS is reached through its S3 endpoint."""
        from pyarrow.fs import S3FileSystem

        client_kwargs = {
            "access_key": self.properties.get(access_key),
            "secret_key": self.properties.get(secret_key),
            "session_token": self.properties.get(session_token),
            "region": self.properties.get(region),
            "endpoint_override": self.properties.get(endpoint),
            # Based on https://github.com/apache/arrow/issues/40506
            "force_virtual_addressing": True,
        }
        client_kwargs.update(self._retry_config())
        self.logger.debug("Creating S3 filesystem with endpoint %s", client_kwargs["endpoint_override"])
        return S3FileSystem(**client_kwargs)

    @staticmethod
    def _retry_config(max_attempts: int = 10, timeout_seconds: int = 60) -> Dict[str, Any]:
        # the standard retry strategy and timeouts need pyarrow 8
        if parse(pyarrow.__version__) < parse("8.0.0"):
            return {}
        from pyarrow.fs import AwsStandardS3RetryStrategy

        return {
            'request_timeout': timeout_seconds,
            'connect_timeout': timeout_seconds,
            'retry_strategy': AwsStandardS3RetryStrategy(max_attempts=max_attempts),
        }

    def new_input_file(self, location: str, length: Optional[int] = None) -> InputFile:
        return ArrowInputFile(self, location, length)

    def new_input_stream(self, path: str):
        return self.filesystem.open_input_file(self.to_filesystem_path(path))

    def get_file_status(self, path: str):
        return self.filesystem.get_file_info([self.to_filesystem_path(path)])[0]

    def exists(self, path: str) -> bool:
        return self.get_file_status(path).type != FileType.NotFound

    def get_file_size(self, path: str) -> int:
        size = self.get_file_status(path).size
        if size is None:
            raise ValueError(f"File size not available for {path}")
        return size

    def to_filesystem_path(self, path: str) -> str:
        """The path of a location as the filesystem expects it: bucket/key on S3, a plain path otherwise."""
        from pyarrow.fs import S3FileSystem

        parsed = urlparse(path)
        # no scheme, or a Windows drive letter parsed as one
        if not parsed.scheme or (len(parsed.scheme) == 1 and not parsed.netloc):
            return str(path)

        normalized_path = re.sub(r'/+', '/', parsed.path) if parsed.path else ''
        if isinstance(self.filesystem, S3FileSystem):
            key = normalized_path.lstrip('/')
            if parsed.netloc:
                return f"{parsed.netloc}/{key}" if key else parsed.netloc
            return key or '.'
        return normalized_path or '.'

    def __getstate__(self):
        state = self.__dict__.copy()
        del state['filesystem']
        del state['logger']
        return state

    def __setstate__(self, state):
        self.__dict__.update(state)
        self.logger = logging.getLogger(__name__)
        self.filesystem = self._initialize_filesystem(self.path)
