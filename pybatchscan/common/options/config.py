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

from pybatchscan.common.options.config_options import ConfigOptions


class ScanOptions:
    """Per-scan read options. Absent options fall back to the table properties."""

    SNAPSHOT_ID = ConfigOptions.key("snapshot-id").long_type().no_default_value().with_description(
        "Snapshot ID of the table snapshot to read")
    AS_OF_TIMESTAMP = ConfigOptions.key("as-of-timestamp").long_type().no_default_value().with_description(
        "Timestamp in milliseconds; the snapshot current as of this time is read")
    SPLIT_SIZE = ConfigOptions.key("split-size").long_type().no_default_value().with_description(
        "Overrides the table's read.split.target-size")
    LOOKBACK = ConfigOptions.key("lookback").int_type().no_default_value().with_description(
        "Overrides the table's read.split.planning-lookback")
    FILE_OPEN_COST = ConfigOptions.key("file-open-cost").long_type().no_default_value().with_description(
        "Overrides the table's read.split.open-file-cost")


class TableProperties:
    """Table-level split planning properties and their defaults."""

    SPLIT_SIZE = ConfigOptions.key("read.split.target-size").long_type().default_value(
        128 * 1024 * 1024).with_description("Target size when combining data input splits")
    SPLIT_LOOKBACK = ConfigOptions.key("read.split.planning-lookback").int_type().default_value(
        10).with_description("Number of bins to consider when combining input splits")
    SPLIT_OPEN_FILE_COST = ConfigOptions.key("read.split.open-file-cost").long_type().default_value(
        4 * 1024 * 1024).with_description("The estimated cost to open a file, used as a minimum weight")


class OssOptions:
    OSS_ACCESS_KEY_ID = ConfigOptions.key("fs.oss.accessKeyId").string_type().no_default_value().with_description(
        "OSS access key ID")
    OSS_ACCESS_KEY_SECRET = ConfigOptions.key(
        "fs.oss.accessKeySecret").string_type().no_default_value().with_description("OSS access key secret")
    OSS_SECURITY_TOKEN = ConfigOptions.key("fs.oss.securityToken").string_type().no_default_value().with_description(
        "OSS security token")
    OSS_ENDPOINT = ConfigOptions.key("fs.oss.endpoint").string_type().no_default_value().with_description(
        "OSS endpoint")
    OSS_REGION = ConfigOptions.key("fs.oss.region").string_type().no_default_value().with_description("OSS region")


class S3Options:
    S3_ACCESS_KEY_ID = ConfigOptions.key("fs.s3.accessKeyId").string_type().no_default_value().with_description(
        "S3 access key ID")
    S3_ACCESS_KEY_SECRET = ConfigOptions.key("fs.s3.accessKeySecret").string_type().no_default_value().with_description(
        "S3 access key secret")
    S3_SECURITY_TOKEN = ConfigOptions.key("fs.s3.securityToken").string_type().no_default_value().with_description(
        "S3 security token")
    S3_ENDPOINT = ConfigOptions.key("fs.s3.endpoint").string_type().no_default_value().with_description("S3 endpoint")
    S3_REGION = ConfigOptions.key("fs.s3.region").string_type().no_default_value().with_description("S3 region")
