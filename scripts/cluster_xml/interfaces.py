"""Callback interfaces for code that observes a ClusterFile.

Protocol:
    InstanceListener — called with the engine after every "instance changed"
                       event (load_extension, begin_initialize, setters, reset)

Listeners are plain callables; any function or object with a matching
``__call__`` satisfies the protocol through structural subtyping.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from cluster_xml.cluster_file import ClusterFile


@runtime_checkable
class InstanceListener(Protocol):
    """Observer of the current snapshot.

    Called synchronously on the thread that changed the snapshot, while the
    engine lock is held. A listener may read the engine freely; work that
    should run after the base snapshot is committed must be scheduled, e.g.
    with ``asyncio.get_running_loop().call_soon``.
    """

    def __call__(self, cluster_file: ClusterFile) -> None:
        ...
