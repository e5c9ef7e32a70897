"""
Chart package for the dashboard.

This package contains:
- PlotlyBuilder: Plotly figure construction, overlay labels drawn from the layout engine
- ChartLifecycleManager: ownership of the live chart handles
- SurfaceSpec / SURFACES: the named drawing surfaces of the page

Usage:
    from clinic_outcomes.services.charts import ChartLifecycleManager

    manager = ChartLifecycleManager()
    await manager.render(snapshot)
"""

from clinic_outcomes.services.charts.lifecycle import (
    ChartHandle,
    ChartLifecycleManager,
    LifecycleState,
)
from clinic_outcomes.services.charts.plotly_builder import PlotlyBuilder
from clinic_outcomes.services.charts.surfaces import SURFACES, SurfaceSpec, mounted_surfaces

__all__ = [
    'ChartHandle',
    'ChartLifecycleManager',
    'LifecycleState',
    'PlotlyBuilder',
    'SURFACES',
    'SurfaceSpec',
    'mounted_surfaces',
]
