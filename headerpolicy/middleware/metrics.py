"""
Prometheus counters for the header policies.
"""

from prometheus_client import Counter

header_policy_applied_total = Counter(
    "header_policy_applied_total",
    "Responses post-processed by a header policy",
    ["policy"],
)

csp_nonces_generated_total = Counter(
    "csp_nonces_generated_total",
    "CSP nonces generated for individual requests",
)

csp_meta_injections_total = Counter(
    "csp_meta_injections_total",
    "Outcome of CSP <meta> tag injection into HTML responses",
    ["outcome"],  # injected | no_head | skipped
)
