"""
System Monitoring Module

Watches the babble process while a corpus is trained. A background thread
logs memory and CPU figures at a fixed interval and escalates to a warning
when resident memory approaches the configured limit. The trainer adds its
own line counts through `log_progress`.
"""

import os
import time
import threading
import psutil
from datetime import datetime

BYTES_PER_MB = 1024 * 1024

# Fractions of the memory limit
WARNING_LEVEL = 0.9
DANGER_LEVEL = 0.95


class MemoryManager:
    """
    Compares the resident memory of this process with a limit in MB.
    """

    def __init__(self, logger, memory_limit_mb=None, memory_limit_percentage=85):
        """
        Args:
            logger: Logger for the limit chosen at startup
            memory_limit_mb (int, optional): Limit in MB. Takes precedence over the percentage
            memory_limit_percentage (float): Share of total system memory used as the limit otherwise
        """
        self.logger = logger
        self.total_system_memory_mb = psutil.virtual_memory().total / BYTES_PER_MB
        self.memory_limit_mb = memory_limit_mb or int(
            self.total_system_memory_mb * memory_limit_percentage / 100)

        self.logger.info("Memory limit set", extra={
            "metrics": {
                "total_system_memory_mb": self.total_system_memory_mb,
                "memory_limit_mb": self.memory_limit_mb
            }
        })

    def get_current_memory_usage(self):
        """
        Returns:
            dict: Resident memory in MB, as a share of the system and of the limit
        """
        rss_mb = psutil.Process(os.getpid()).memory_info().rss / BYTES_PER_MB
        return {
            "current_mb": rss_mb,
            "percent_used": rss_mb / self.total_system_memory_mb * 100,
            "system_percent_used": psutil.virtual_memory().percent,
            "limit_mb": self.memory_limit_mb
        }

    def check_memory_health(self):
        """
        Classify current memory use against the limit.

        Returns:
            tuple: (is_healthy, memory_usage, message). `message` starts with
            WARNING above 90% of the limit and DANGER above 95%; it is None
            below both.
        """
        usage = self.get_current_memory_usage()
        share = usage["current_mb"] / self.memory_limit_mb

        if share > DANGER_LEVEL:
            level = "DANGER"
        elif share > WARNING_LEVEL:
            level = "WARNING"
        else:
            return True, usage, None

        message = (f"{level}: Memory usage at {usage['current_mb']:.2f} MB, "
                   f"{share * 100:.1f}% of limit")
        return level != "DANGER", usage, message


class ResourceMonitor:
    """
    Logs resource usage of one operation (corpus training) from a daemon thread.
    """

    def __init__(self, logger, memory_limit_mb=None, memory_limit_percentage=85,
                 monitoring_interval=10.0):
        """
        Args:
            logger: Logger receiving the resource metrics
            memory_limit_mb (int, optional): Memory limit in MB
            memory_limit_percentage (float): Share of system memory used as the limit when no MB value is given
            monitoring_interval (float): Seconds between two background reports
        """
        self.logger = logger
        self.monitoring_interval = monitoring_interval
        self.memory_manager = MemoryManager(logger, memory_limit_mb, memory_limit_percentage)

        self.stop_event = threading.Event()
        self.monitoring_thread = None
        self.current_operation = None
        self.operation_start_time = None

        self.logger.info("ResourceMonitor initialized", extra={
            "metrics": {"monitoring_interval": monitoring_interval}
        })

    def get_resource_usage(self):
        """
        Returns:
            dict: Memory, CPU and thread figures for this process
        """
        process = psutil.Process(os.getpid())
        return {
            "timestamp": datetime.now().isoformat(),
            "memory": self.memory_manager.get_current_memory_usage(),
            "cpu": {
                "process_percent": process.cpu_percent(interval=None),
                "system_percent": psutil.cpu_percent(interval=None),
                "logical_cores": psutil.cpu_count(logical=True)
            },
            "threads": threading.active_count(),
            "process_id": os.getpid()
        }

    def _monitoring_loop(self):
        while not self.stop_event.wait(self.monitoring_interval):
            try:
                resources = self.get_resource_usage()
                _, _, warning = self.memory_manager.check_memory_health()
            except psutil.Error as e:
                self.logger.error(f"Error in monitoring loop: {str(e)}")
                continue

            if warning:
                self.logger.warning(warning, extra={"metrics": resources})
            else:
                self.logger.info("Resource usage metrics", extra={
                    "metrics": dict(resources, operation=self.current_operation)
                })

    def start(self, operation_name=None):
        """
        Start reporting in the background. Does nothing if already running.

        Args:
            operation_name (str, optional): Name attached to every report
        """
        if self.monitoring_thread and self.monitoring_thread.is_alive():
            return

        self.current_operation = operation_name
        self.operation_start_time = time.time()
        self.stop_event.clear()
        self.monitoring_thread = threading.Thread(target=self._monitoring_loop, daemon=True)
        self.monitoring_thread.start()

        self.logger.info(f"Resource monitoring started for operation: {operation_name}", extra={
            "metrics": self.get_resource_usage()
        })

    def stop(self):
        """Stop the background thread and log the operation's duration."""
        if not self.monitoring_thread:
            return

        self.stop_event.set()
        self.monitoring_thread.join(timeout=2.0)
        self.monitoring_thread = None

        self.logger.info("Resource monitoring stopped", extra={
            "metrics": dict(self.get_resource_usage(),
                            operation=self.current_operation,
                            duration=time.time() - self.operation_start_time)
        })
        self.current_operation = None
        self.operation_start_time = None

    def log_progress(self, message, operation=None, extra_metrics=None):
        """
        Log a progress message with the current resource figures.

        Args:
            message (str): Progress message
            operation (str, optional): Replaces the current operation name when given
            extra_metrics (dict, optional): Caller's own counters, merged into the metrics
        """
        if operation:
            self.current_operation = operation

        metrics = {"system_resources": self.get_resource_usage()}
        if extra_metrics:
            metrics.update(extra_metrics)
        if self.operation_start_time:
            metrics["elapsed_time"] = time.time() - self.operation_start_time

        self.logger.info(message, extra={"metrics": metrics})
