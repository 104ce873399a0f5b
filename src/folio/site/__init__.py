"""Site aggregation — directory and tag groups, pagination, navigation."""

from folio.site.aggregate import SiteAggregate, TagSummary, aggregate
from folio.site.nav import NavNode, build_nav

__all__ = [
    "NavNode",
    "SiteAggregate",
    "TagSummary",
    "aggregate",
    "build_nav",
]
