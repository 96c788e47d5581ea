"""
Static collector roster.

Sensitive collectors measure CPU activity and must run one at a time with
a pause in between; everything else is safe to run concurrently.
"""
from __future__ import annotations

from typing import List

from shared.collectors.base import (
    Collector,
    ShellMetricCollector,
    parse_float_or_zero,
    parse_yes_no,
)
from shared.collectors.system import (
    KernelErrorsCollector,
    LoadAverageCollector,
    SmartStatusCollector,
)


def sensitive_collectors() -> List[Collector]:
    return [
        ShellMetricCollector(
            name="cpu_usage_percent",
            unit="%",
            command="vmstat 1 2 | tail -1 | awk '{printf(\"%.1f\\n\", 100-$15)}'",
        ),
        ShellMetricCollector(
            name="cpu_usage_total_percent",
            unit="%",
            command=(
                "top -bn1 | grep '%Cpu(s)' | awk -F'[, ]+' "
                "'{us=$2+0; sy=$4+0; ni=$6+0; printf \"%.1f\\n\", us+sy+ni}'"
            ),
        ),
        ShellMetricCollector(
            name="cpu_total_queue_length",
            unit="count",
            command="vmstat 1 2 | tail -1 | awk '{print $1+$2}'",
        ),
    ]


def regular_collectors() -> List[Collector]:
    return [
        ShellMetricCollector(
            name="memory_usage_percent",
            unit="%",
            command="free | awk 'NR==2{printf \"%.1f\\n\", $3*100/$2}'",
        ),
        ShellMetricCollector(
            name="swap_total_usage_percent",
            unit="%",
            command="free | awk 'NR==3 {if($2>0) printf \"%.1f\\n\", $3*100/$2; else print \"0\"}'",
        ),
        ShellMetricCollector(
            name="disk_free_percent",
            unit="%",
            command="df -kP / | awk 'NR==2 {gsub(\"%\",\"\"); print 100-$5}'",
        ),
        LoadAverageCollector(),
        ShellMetricCollector(
            name="top_cpu_processes_total_cpu_percent",
            unit="%",
            command="ps aux --sort=-%cpu | head -6 | tail -5 | awk '{sum+=$3} END {printf \"%.1f\\n\", sum}'",
        ),
        ShellMetricCollector(
            name="top_mem_processes_total_mem_percent",
            unit="%",
            command="ps aux --sort=-%mem | head -6 | tail -5 | awk '{sum+=$4} END {printf \"%.1f\\n\", sum}'",
        ),
        ShellMetricCollector(
            name="io_wait_percent",
            unit="%",
            command="vmstat 1 2 | tail -1 | awk '{print $16}'",
            parse=parse_float_or_zero,
        ),
        ShellMetricCollector(
            name="disk_total_iops",
            unit="iops",
            command=(
                "iostat -dx 1 2 | awk '/^Device/{flag=1; next} "
                "flag && NF>0 && !/^avg-cpu/ {sum+=$4+$5} END {print int(sum)}'"
            ),
            parse=parse_float_or_zero,
        ),
        ShellMetricCollector(
            name="inodes_usage_percent",
            unit="%",
            command="df -i / | tail -1 | awk '{print $5}' | sed 's/%//'",
            parse=parse_float_or_zero,
        ),
        SmartStatusCollector(),
        KernelErrorsCollector(),
        ShellMetricCollector(
            name="systemd_errors_total_count",
            unit="count",
            command="journalctl -p 3 -xb --no-pager | wc -l",
            parse=parse_float_or_zero,
        ),
        ShellMetricCollector(
            name="systemd_failed_units_count",
            unit="count",
            command="systemctl --failed --no-legend --no-pager | grep -c failed || true",
            parse=parse_float_or_zero,
        ),
        ShellMetricCollector(
            name="network_errors_total",
            unit="count",
            command="ip -s link | grep -A 5 'RX:' | grep 'errors' | awk '{sum+=$1} END {print sum+0}'",
            parse=parse_float_or_zero,
        ),
        ShellMetricCollector(
            name="network_latency_avg_ms",
            unit="ms",
            command="ping -c 3 -W 1 8.8.8.8 | tail -1 | awk -F'/' '{print $5}'",
            parse=parse_float_or_zero,
        ),
        ShellMetricCollector(
            name="time_sync_ntp_synchronized",
            unit="bool",
            command=(
                "timedatectl status | grep 'System clock synchronized' "
                "| awk '{print $4}' | tr '[:upper:]' '[:lower:]'"
            ),
            parse=parse_yes_no,
        ),
        ShellMetricCollector(
            name="temperature_max_celsius",
            unit="°C",
            command="sensors | awk '/°C/ {gsub(\"[+°C]\", \"\", $2); if($2 > max) max=$2} END {print max+0}'",
        ),
    ]
