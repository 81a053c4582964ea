"""
Prometheus 指标定义

所有指标统一在此文件定义，中间件和业务代码按需引用。
"""

from prometheus_client import Counter, Histogram

# ── 请求级指标 ──

REQUEST_TOTAL = Counter(
    "kv_todo_request_total",
    "HTTP 请求总数",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "kv_todo_request_duration_ms",
    "HTTP 请求耗时（毫秒）",
    ["method", "endpoint"],
    buckets=[5, 10, 25, 50, 100, 200, 500, 1000, 2000],
)

# ── 业务指标 ──

TODO_MUTATION_TOTAL = Counter(
    "kv_todo_mutation_total",
    "Todo 写操作总数",
    ["operation"],  # create/update/delete/delete_all
)

AUTH_EVENT_TOTAL = Counter(
    "kv_todo_auth_event_total",
    "认证事件总数",
    ["event", "outcome"],  # event: signup/login/logout/refresh, outcome: success/failure
)

# ── 错误指标 ──

ERROR_TOTAL = Counter(
    "kv_todo_error_total",
    "业务错误总数",
    ["error_type"],  # ValidationError/NotFoundError/AuthError/...
)
