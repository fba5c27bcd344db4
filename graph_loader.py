import json
import logging

import networkx as nx

logger = logging.getLogger(__name__)


class GraphLoadError(ValueError):
    pass


def _genre_names(genres):
    names = []
    for genre in genres or []:
        if isinstance(genre, dict):
            genre = genre.get("name")
        if genre:
            names.append(str(genre))
    return names


def build_graph(document):
    """
    Builds an undirected artist graph from a graph document:
    {"artists": [...], "relationships": [{"artist_id", "related_artist_id"}]}.

    Relationships are stored in both directions upstream, so each pair is
    kept once. Node ids are artist ids as strings.
    """
    if not isinstance(document, dict):
        raise GraphLoadError("Graph document must be a JSON object")

    artists = document.get("artists")
    if not isinstance(artists, list):
        raise GraphLoadError("Graph document has no 'artists' list")
    relationships = document.get("relationships", [])
    if not isinstance(relationships, list):
        raise GraphLoadError("'relationships' must be a list")

    graph = nx.Graph()
    for artist in artists:
        if not isinstance(artist, dict) or "id" not in artist or not artist.get("name"):
            raise GraphLoadError(f"Artist entry needs an id and a name: {artist!r}")
        rating = artist.get("rating")
        try:
            rating = 5 if rating is None else int(rating)
        except (TypeError, ValueError):
            raise GraphLoadError(f"Invalid rating for {artist['name']}: {rating!r}")
        graph.add_node(
            str(artist["id"]),
            name=str(artist["name"]),
            location=artist.get("location"),
            rating=rating,
            explored=bool(artist.get("explored")),
            genres=_genre_names(artist.get("genres")),
        )

    skipped = 0
    for rel in relationships:
        try:
            a = str(rel["artist_id"])
            b = str(rel["related_artist_id"])
        except (KeyError, TypeError):
            raise GraphLoadError(f"Malformed relationship: {rel!r}")

        if a == b or a not in graph or b not in graph:
            skipped += 1
            continue
        # nx.Graph collapses the reverse direction onto the same edge
        graph.add_edge(a, b)

    if skipped:
        logger.warning(f"Skipped {skipped} self or dangling relationships")

    return graph


def load_graph_file(path):
    """Reads a graph document from disk. Returns (graph, physics settings or None)."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        raise GraphLoadError(f"Invalid JSON in {path}: {e}")

    graph = build_graph(document)
    physics = document.get("physics")
    logger.info(f"Read {graph.number_of_nodes()} artists and {graph.number_of_edges()} connections from {path}")
    return graph, physics
