# === NAVMAP v1 ===
# {
#   "module": "OpsKit.concurrency.__init__",
#   "purpose": "Concurrency helpers shared across OpsKit components.",
#   "sections": []
# }
# === /NAVMAP ===

"""
Concurrency helpers shared across OpsKit components.

Exposes the cooperative :class:`CancellationToken`, the capacity-one
:class:`Channel`, the cyclic producer :func:`infinite_range`, and the fault
boundaries used by worker loops consuming those producers.
"""

from .cancellation import CancellationToken
from .channels import Channel, ChannelClosed
from .cycle import infinite_range
from .supervision import guarded, on_panic, run_worker_loop

__all__ = [
    "CancellationToken",
    "Channel",
    "ChannelClosed",
    "guarded",
    "infinite_range",
    "on_panic",
    "run_worker_loop",
]
