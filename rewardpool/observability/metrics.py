# MIT License
# Copyright (c) 2025 Hashborn

"""
Prometheus Metrics

Reward pool metrics, kept in a private Prometheus registry.

Metrics:
- Operations committed / failed, by operation type
- Claim indices settled and skipped
- Total stake, distribution count
- Rewards paid out per asset
"""

from prometheus_client import Counter, Gauge, CollectorRegistry

# Create registry for metrics
metrics_registry = CollectorRegistry()

# ═══════════════════════════════════════════════════════════════════
# OPERATION METRICS
# ═══════════════════════════════════════════════════════════════════

operations_total = Counter(
    'rewardpool_operations_total',
    'Total number of committed pool operations',
    ['operation'],
    registry=metrics_registry
)

operation_failures_total = Counter(
    'rewardpool_operation_failures_total',
    'Total number of rolled back pool operations',
    ['operation', 'error'],
    registry=metrics_registry
)

# ═══════════════════════════════════════════════════════════════════
# CLAIM METRICS
# ═══════════════════════════════════════════════════════════════════

claims_settled_total = Counter(
    'rewardpool_claims_settled_total',
    'Total number of distribution indices settled by claims',
    registry=metrics_registry
)

claims_skipped_total = Counter(
    'rewardpool_claims_skipped_total',
    'Total number of claim indices skipped (settled, pre-join or future)',
    registry=metrics_registry
)

reward_paid_total = Counter(
    'rewardpool_reward_paid_total',
    'Total reward amount paid out to stakers',
    ['asset'],
    registry=metrics_registry
)

# ═══════════════════════════════════════════════════════════════════
# LEDGER METRICS
# ═══════════════════════════════════════════════════════════════════

total_staked = Gauge(
    'rewardpool_total_staked',
    'Current total stake of the reference asset',
    registry=metrics_registry
)

distributions = Gauge(
    'rewardpool_distributions',
    'Number of distributions recorded',
    registry=metrics_registry
)


def update_metrics(state) -> None:
    """Refresh gauges from a committed LedgerState."""
    total_staked.set(state.ledger.total_staked)
    distributions.set(state.registry.count)
