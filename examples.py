"""Showcase examples for animgraph README."""

from animgraph import LayoutSession, parse_graph, render_to_svg


def hero_example():
    """Hero example: every routing strategy in one compact diagram."""
    render_to_svg(
        {
            "nodes": [
                {"id": "user", "name": "User"},
                {"id": "web", "name": "Web"},
                {"id": "api", "name": "API"},
                {"id": "cache", "name": "Cache"},
                {"id": "db", "name": "Database"},
                {"id": "jobs", "name": "Jobs"},
            ],
            "edges": [
                # Grid neighbours: direct two-point line
                {"source": "user", "target": "web", "speed": "fast"},
                # Web is in the way: orthogonal detour
                {"source": "user", "target": "api"},
                # Clear corner-to-corner line
                {"source": "user", "target": "jobs", "speed": "slow"},
                # Declared types always win
                {"source": "cache", "target": "api", "type": "curved"},
                {"source": "db", "target": "user", "type": "orthogonal"},
            ],
        },
        filename="docs/hero",
    )


def example_pipeline():
    """Data pipeline on a four column grid with per-node overrides."""
    render_to_svg(
        {
            "nodes": [
                {"id": "src", "name": "Sources"},
                {"id": "ingest", "name": "Ingestion"},
                {"id": "proc", "name": "Processing", "layoutConfig": {"boxWidth": 160}},
                {"id": "lake", "name": "Data Lake"},
                {"id": "train", "name": "Training", "layoutConfig": {"y": 400}},
                {"id": "serve", "name": "Serving", "layoutConfig": {"x": 600, "y": 400}},
            ],
            "edges": [
                {"source": "src", "target": "ingest"},
                {"source": "ingest", "target": "proc", "speed": "fast"},
                {"source": "proc", "target": "lake"},
                {"source": "lake", "target": "train", "type": "curved"},
                {"source": "train", "target": "serve", "speed": 0.6},
                {"source": "src", "target": "lake"},
            ],
            "layoutConfig": {"columnsPerRow": 4, "startX": 150, "width": 1000, "height": 800},
        },
        filename="docs/example_pipeline",
    )


def example_event_driven():
    """Event-Driven Architecture - Broker topology, recomputed in a session."""
    document = parse_graph({
        "nodes": [
            {"id": "initiator", "name": "Initiating Event"},
            {"id": "ch1", "name": "Channel 1"},
            {"id": "proc1", "name": "Processor 1"},
            {"id": "ch2", "name": "Channel 2"},
            {"id": "proc2", "name": "Processor 2"},
            {"id": "proc3", "name": "Processor 3"},
        ],
        "edges": [
            {"source": "initiator", "target": "ch1"},
            {"source": "ch1", "target": "proc1"},
            {"source": "proc1", "target": "ch2"},
            {"source": "ch2", "target": "proc2"},
            {"source": "ch2", "target": "proc3", "type": "diagonal"},
        ],
    })

    session = LayoutSession()
    result = session.recompute(document)
    for routed in result.edges:
        route = routed.route
        print(f"  {routed.edge.source} -> {routed.edge.target}: "
              f"{route.strategy.value}, {len(route.points)} points")

    render_to_svg(document, filename="docs/example_event_driven")


if __name__ == "__main__":
    import os

    os.makedirs("docs", exist_ok=True)

    print("Generating hero example...")
    hero_example()

    print("Generating data pipeline example...")
    example_pipeline()

    print("Generating event-driven architecture...")
    example_event_driven()

    print("\nAll examples generated in docs/")
