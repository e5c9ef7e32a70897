"""
Chart lifecycle management.

The manager owns every live chart of the dashboard. Whenever a new snapshot
arrives it destroys the charts it holds before building new ones, so no
figure from a previous period stays referenced.

States:
    EMPTY ──render()──▶ RENDERING ──built──▶ LIVE
      ▲                                        │
      └──────────── render() (destroy all) ◀───┘
    EMPTY | RENDERING | LIVE ──close()──▶ DESTROYED

Known limitation: an older render that completes after a newer one was
started replaces the newer charts. Only the most recently *completed*
render stays live.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Mapping, Optional, Tuple

import plotly.graph_objects as go

from clinic_outcomes.core.exceptions import ChartDestroyedError, LifecycleError
from clinic_outcomes.schemas.metrics import MetricsSnapshot
from clinic_outcomes.services.charts.plotly_builder import PlotlyBuilder
from clinic_outcomes.services.charts.surfaces import SURFACES, SurfaceSpec
from clinic_outcomes.services.layout import ChartKind, LabelSpec

logger = logging.getLogger(__name__)

SurfaceProvider = Callable[[], Mapping[str, SurfaceSpec]]


class LifecycleState(str, Enum):
    EMPTY = "empty"
    RENDERING = "rendering"
    LIVE = "live"
    DESTROYED = "destroyed"


class ChartHandle:
    """
    Ownership token for one live chart.

    Only the lifecycle manager creates and destroys handles. After
    ``destroy()`` the figure and labels are released and any access raises
    ChartDestroyedError.
    """

    def __init__(self, surface: SurfaceSpec, figure: go.Figure, labels: Tuple[LabelSpec, ...]):
        self.surface = surface
        self._figure: Optional[go.Figure] = figure
        self._labels: Tuple[LabelSpec, ...] = labels
        self._destroyed = False

    @property
    def surface_id(self) -> str:
        return self.surface.surface_id

    @property
    def kind(self) -> ChartKind:
        return self.surface.kind

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def figure(self) -> go.Figure:
        if self._destroyed:
            raise ChartDestroyedError(surface_id=self.surface_id)
        return self._figure

    @property
    def labels(self) -> Tuple[LabelSpec, ...]:
        if self._destroyed:
            raise ChartDestroyedError(surface_id=self.surface_id)
        return self._labels

    def destroy(self) -> None:
        """Release the figure and labels. Safe to call more than once."""
        if self._destroyed:
            return
        self._figure = None
        self._labels = ()
        self._destroyed = True

    def __repr__(self) -> str:
        state = "destroyed" if self._destroyed else "live"
        return f"ChartHandle({self.surface_id!r}, {state})"


def all_surfaces() -> Mapping[str, SurfaceSpec]:
    return SURFACES


class ChartLifecycleManager:
    """
    Owns the set of live ChartHandles for the displayed period.

    Usage:
        async with ChartLifecycleManager(render_delay=0.1) as manager:
            await manager.render(snapshot)
            for handle in manager.handles:
                ...
        # every handle is destroyed here
    """

    def __init__(
        self,
        builder: Optional[PlotlyBuilder] = None,
        surface_provider: Optional[SurfaceProvider] = None,
        render_delay: float = 0.0,
    ):
        """
        Initialize the manager.

        Args:
            builder: Builder used to construct figures. Defaults to PlotlyBuilder().
            surface_provider: Returns the currently mounted surfaces keyed by id.
                              Defaults to every dashboard surface.
            render_delay: Seconds to wait before building, so surfaces can settle.
        """
        self._builder = builder or PlotlyBuilder()
        self._surface_provider = surface_provider or all_surfaces
        self._render_delay = render_delay
        self._handles: List[ChartHandle] = []
        self._state = LifecycleState.EMPTY

    @property
    def builder(self) -> PlotlyBuilder:
        return self._builder

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def handles(self) -> Tuple[ChartHandle, ...]:
        return tuple(self._handles)

    @property
    def live_count(self) -> int:
        return len(self._handles)

    async def render(self, snapshot: MetricsSnapshot) -> Tuple[ChartHandle, ...]:
        """
        Replace every live chart with charts built from ``snapshot``.

        Charts whose surface is not mounted are skipped. If building fails,
        the charts built in this cycle are destroyed and the error propagates.

        Raises:
            LifecycleError: If the manager was closed.
        """
        self._ensure_open()
        self._release_all()
        self._state = LifecycleState.RENDERING

        if self._render_delay > 0:
            await asyncio.sleep(self._render_delay)
        self._ensure_open()

        # Another render may have completed while this one was waiting
        self._release_all()
        self._state = LifecycleState.RENDERING

        surfaces = self._surface_provider()
        built: List[ChartHandle] = []
        try:
            for kind in ChartKind:
                surface = surfaces.get(kind.value)
                if surface is None:
                    logger.debug("Drawing surface not mounted - skipping chart", extra={"surface_id": kind.value})
                    continue
                figure, labels = self._builder.build(kind, snapshot, surface)
                built.append(ChartHandle(surface, figure, labels))
        except Exception:
            for handle in built:
                handle.destroy()
            self._state = LifecycleState.EMPTY
            raise

        self._handles = built
        self._state = LifecycleState.LIVE
        logger.info(
            "Charts rendered",
            extra={
                "reporting_period": snapshot.reporting_period,
                "charts": [h.surface_id for h in built],
            }
        )
        return tuple(built)

    def close(self) -> None:
        """Destroy every chart unconditionally. The manager cannot render afterwards."""
        if self._state is LifecycleState.DESTROYED:
            return
        released = self._release_all()
        self._state = LifecycleState.DESTROYED
        logger.info("Chart lifecycle closed", extra={"released": released})

    async def __aenter__(self) -> "ChartLifecycleManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._state is LifecycleState.DESTROYED:
            raise LifecycleError(state=self._state.value)

    def _release_all(self) -> int:
        released = len(self._handles)
        for handle in self._handles:
            handle.destroy()
        self._handles = []
        if self._state is not LifecycleState.DESTROYED:
            self._state = LifecycleState.EMPTY
        return released
