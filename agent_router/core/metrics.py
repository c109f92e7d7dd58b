"""Prometheus metrics for the agent router"""

from prometheus_client import Counter, Histogram, Gauge, Info, generate_latest, REGISTRY

registry = REGISTRY

service_info = Info('agent_router_service', 'Agent router service information', registry=registry)
service_info.info({
    'version': '0.1.0',
    'service': 'agent-router'
})

# ============================================================================
# CONTEXT REGISTRY
# ============================================================================

registered_contexts = Gauge(
    'agent_router_registered_contexts',
    'Number of context definitions currently registered',
    registry=registry
)

context_files_loaded_total = Counter(
    'agent_router_context_files_loaded_total',
    'Context definition files processed by load_contexts',
    ['format', 'status'],
    registry=registry
)

context_overwrites_total = Counter(
    'agent_router_context_overwrites_total',
    'Registrations that replaced an existing context id',
    registry=registry
)

context_lookups_total = Counter(
    'agent_router_context_lookups_total',
    'Context discovery queries',
    ['kind', 'result'],
    registry=registry
)

# ============================================================================
# ROUTING
# ============================================================================

permission_denials_total = Counter(
    'agent_router_permission_denials_total',
    'Agent access requests refused by the authorization policy',
    ['policy', 'context_id'],
    registry=registry
)

route_requests_total = Counter(
    'agent_router_route_requests_total',
    'Requests routed to contexts',
    ['context_id', 'status'],
    registry=registry
)

route_duration_seconds = Histogram(
    'agent_router_route_duration_seconds',
    'Time spent forwarding a request to a context',
    ['context_id'],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=registry
)

transport_retries_total = Counter(
    'agent_router_transport_retries_total',
    'Retry attempts made by the HTTP transport',
    ['context_id'],
    registry=registry
)

# Circuit breaker state (0=closed, 1=half_open, 2=open)
circuit_breaker_state = Gauge(
    'agent_router_circuit_breaker_state',
    'Circuit breaker state (0=closed, 1=half_open, 2=open)',
    ['name'],
    registry=registry
)

circuit_breaker_transitions_total = Counter(
    'agent_router_circuit_breaker_transitions_total',
    'Circuit breaker state transitions',
    ['name', 'from_state', 'to_state'],
    registry=registry
)

# ============================================================================
# AGENTS
# ============================================================================

instructions_processed_total = Counter(
    'agent_router_instructions_processed_total',
    'Instructions handled by agents',
    ['agent', 'action', 'status'],
    registry=registry
)

transactions_submitted_total = Counter(
    'agent_router_transactions_submitted_total',
    'Transactions submitted by agents',
    ['agent', 'status'],
    registry=registry
)


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format"""
    return generate_latest(registry)


# ============================================================================
# METRIC RECORDING FUNCTIONS
# ============================================================================

def update_registered_contexts(count: int):
    registered_contexts.set(count)


def record_context_file_loaded(data_format: str, status: str):
    context_files_loaded_total.labels(format=data_format, status=status).inc()


def record_context_overwrite():
    context_overwrites_total.inc()


def record_context_lookup(kind: str, matched: int):
    """Record a discovery query; result is 'hit' or 'empty'"""
    context_lookups_total.labels(kind=kind, result="hit" if matched else "empty").inc()


def record_permission_denial(policy: str, context_id: str):
    permission_denials_total.labels(policy=policy, context_id=context_id).inc()


def record_route_request(context_id: str, status: str, duration: float = None):
    route_requests_total.labels(context_id=context_id, status=status).inc()
    if duration is not None:
        route_duration_seconds.labels(context_id=context_id).observe(duration)


def record_transport_retry(context_id: str):
    transport_retries_total.labels(context_id=context_id).inc()


def record_circuit_transition(name: str, from_state: str, to_state: str, value: int):
    circuit_breaker_state.labels(name=name).set(value)
    circuit_breaker_transitions_total.labels(
        name=name, from_state=from_state, to_state=to_state
    ).inc()


def record_instruction(agent: str, action: str, status: str):
    instructions_processed_total.labels(agent=agent, action=action, status=status).inc()


def record_transaction(agent: str, status: str):
    transactions_submitted_total.labels(agent=agent, status=status).inc()
