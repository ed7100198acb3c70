from gymticks.models import Route, RouteId
from gymticks.ordered import OrderedMap
from gymticks.taxonomy import Taxonomy, rank


def sort_key(route: Route, taxonomy: Taxonomy) -> tuple[int, int, int, str]:
    return (
        rank(taxonomy.sections, route.section),
        rank(taxonomy.colors, route.color),
        rank(taxonomy.grades, route.grade),
        route.title,
    )


def sort_routes(routes: OrderedMap[RouteId, Route], taxonomy: Taxonomy) -> OrderedMap[RouteId, Route]:
    """Section, then color, then grade rank, then title; ties keep their order."""
    return routes.sorted(key=lambda route: sort_key(route, taxonomy))
