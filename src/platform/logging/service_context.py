"""
Service context for log lines.

Identifies which booking-engine instance wrote a line when several instances
share one log collector (multi-instance deployments use the Kvrocks change
channel, so their logs interleave).
"""

from functools import lru_cache
import os


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'turf-booking')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container hostname in orchestrated deployments, PID locally
    instance = os.getenv('HOSTNAME', '')[:12] or str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance}'
