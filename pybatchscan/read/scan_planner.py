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
from typing import List, Optional

from pybatchscan.common.exceptions import PlanningException
from pybatchscan.common.lazy import Lazy
from pybatchscan.common.options.config import TableProperties
from pybatchscan.read.cache_key import CacheKey
from pybatchscan.read.planning_cache import PLANNING_CACHE, PlanningCache
from pybatchscan.read.scan_config import ScanConfig
from pybatchscan.read.scan_task import CombinedScanTask
from pybatchscan.read.table_scan import TableScan

logger = logging.getLogger(__name__)


class ScanPlanner:
    """
    Plans the task groups of a scan config. Plans are shared through the planning cache by every
    planner whose scan has the same cache key, and memoized per planner.
    """

    def __init__(self, config: ScanConfig, cache: Optional[PlanningCache] = None):
        self.config = config
        self._cache = cache if cache is not None else PLANNING_CACHE
        self._tasks: Lazy[List[CombinedScanTask]] = Lazy(self._plan)

    def tasks(self) -> List[CombinedScanTask]:
        return self._tasks.get()

    def new_table_scan(self) -> TableScan:
        config = self.config
        scan = config.table.new_scan() \
            .case_sensitive(config.case_sensitive) \
            .project(config.expected_schema)

        if config.snapshot_id is not None:
            scan = scan.use_snapshot(config.snapshot_id)
        if config.as_of_timestamp is not None:
            scan = scan.as_of_time(config.as_of_timestamp)

        if config.split_size is not None:
            scan = scan.option(TableProperties.SPLIT_SIZE.key(), str(config.split_size))
        if config.split_lookback is not None:
            scan = scan.option(TableProperties.SPLIT_LOOKBACK.key(), str(config.split_lookback))
        if config.split_open_file_cost is not None:
            scan = scan.option(TableProperties.SPLIT_OPEN_FILE_COST.key(), str(config.split_open_file_cost))

        for predicate in config.filters:
            scan = scan.filter(predicate)
        return scan

    def _plan(self) -> List[CombinedScanTask]:
        scan = self.new_table_scan()
        key = CacheKey.from_scan(scan, self.config.split_size)
        return self._cache.get(key, lambda _: self._plan_tasks(scan))

    def _plan_tasks(self, scan: TableScan) -> List[CombinedScanTask]:
        logger.info("Planning tasks for %s (no cached tasks available)", self.config.table)
        tasks_iterable = None
        try:
            tasks_iterable = scan.plan_tasks()
            return list(tasks_iterable)
        except OSError as e:
            raise PlanningException(str(self.config.table), e) from e
        finally:
            if tasks_iterable is not None:
                tasks_iterable.close()
