"""Resolution selection and fallback ordering."""

from typing import List, Optional, Sequence

from .errors import ResolutionUnavailableError
from .models import AssetVariant, ResolutionTable

DEFAULT_TABLE = ResolutionTable()


def resolution_table_for(args) -> ResolutionTable:
    """Return the table configured on *args*, or the built-in one."""
    table = getattr(args, "resolution_table", None)
    return table if table is not None else DEFAULT_TABLE


def select_asset_url(
    catalog: Sequence[AssetVariant],
    label: str,
    table: Optional[ResolutionTable] = None,
) -> str:
    """Return the URL of the variant whose height matches *label* exactly."""
    table = table if table is not None else DEFAULT_TABLE
    height = table.height_for(label)
    if height is None:
        raise ResolutionUnavailableError(f"Unknown resolution '{label}'")

    for variant in catalog:
        if variant.height == height:
            return variant.url

    raise ResolutionUnavailableError(f"Resolution {label} not available")


def candidate_resolutions(
    catalog: Optional[Sequence[AssetVariant]],
    table: Optional[ResolutionTable] = None,
) -> List[str]:
    """Order the resolutions to try, highest first.

    With a catalog, only heights it actually offers (and the table knows) are
    returned. Without one, every label in the table is tried.
    """
    table = table if table is not None else DEFAULT_TABLE
    if catalog is None:
        return table.labels()

    labels: List[str] = []
    for height in sorted({variant.height for variant in catalog}, reverse=True):
        label = table.label_for(height)
        if label is not None:
            labels.append(label)
    return labels


def unlisted_heights(
    catalog: Sequence[AssetVariant],
    table: Optional[ResolutionTable] = None,
) -> List[int]:
    """Heights present in *catalog* that have no label in *table*."""
    table = table if table is not None else DEFAULT_TABLE
    return sorted(
        {variant.height for variant in catalog if table.label_for(variant.height) is None},
        reverse=True,
    )
