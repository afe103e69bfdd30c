"""animgraph - Animated node/edge diagrams with obstacle-aware edge routing.

Example usage:
    from animgraph import parse_graph, route_graph, render_to_svg

    document = parse_graph({
        "nodes": [{"id": "a", "name": "API"}, {"id": "b", "name": "DB"}],
        "edges": [{"source": "a", "target": "b", "speed": "fast"}],
    })
    result = route_graph(document)
    for routed in result.edges:
        print(routed.edge.key, routed.route.points)

    svg = render_to_svg(document, filename="diagram")
"""

from .builders import (
    build_adjacent,
    build_curved,
    build_diagonal,
    build_orthogonal,
    score_path,
)
from .cache import RouteCache
from .connection import (
    ConnectionPoint,
    connection_point,
    connection_points,
    is_grid_adjacent,
)
from .document import (
    DocumentError,
    GraphDocument,
    NodeSpec,
    format_graph_data,
    parse_graph,
)
from .geometry import Rect
from .layout import (
    LayoutConfig,
    NodeSpace,
    arrange_in_grid,
    calculate_graph_dimensions,
    space_of,
)
from .models import (
    ANIMATION_SPEEDS,
    Direction,
    Edge,
    EdgeType,
    Node,
    Route,
    Strategy,
)
from .pathfinding import (
    GridKey,
    PathfindingConfig,
    find_route,
)
from .renderer import (
    DEFAULT_THEME,
    DiagramRenderer,
    Theme,
    render_to_svg,
    route_center,
    route_path_data,
)
from .router import (
    EdgeRouter,
    LayoutResult,
    LayoutSession,
    RoutedEdge,
    route_graph,
    select_strategy,
)

__version__ = "0.1.0"

__all__ = [
    # Documents
    "GraphDocument",
    "NodeSpec",
    "DocumentError",
    "parse_graph",
    "format_graph_data",
    # Models
    "Node",
    "Edge",
    "EdgeType",
    "Direction",
    "Strategy",
    "Route",
    "Rect",
    "ANIMATION_SPEEDS",
    # Layout
    "LayoutConfig",
    "NodeSpace",
    "space_of",
    "arrange_in_grid",
    "calculate_graph_dimensions",
    # Routing
    "ConnectionPoint",
    "connection_point",
    "connection_points",
    "is_grid_adjacent",
    "select_strategy",
    "build_adjacent",
    "build_orthogonal",
    "build_diagonal",
    "build_curved",
    "score_path",
    "PathfindingConfig",
    "GridKey",
    "find_route",
    "RouteCache",
    "EdgeRouter",
    "RoutedEdge",
    "LayoutResult",
    "LayoutSession",
    "route_graph",
    # Rendering
    "render_to_svg",
    "route_path_data",
    "route_center",
    "DiagramRenderer",
    "Theme",
    "DEFAULT_THEME",
    # Version
    "__version__",
]
