"""
Specification Catalog Loader
============================

Builds a SpecificationCatalog from the built-in tables or from a JSON
file with the layout produced by `SpecificationCatalog.to_dict()`:

    {
        "version": "1.0.0",
        "mqp": [{"criteria": "MQP", "sub_criteria": ..., "specification": ...}],
        "visual_el": [{"criteria": "EL", ..., "criteria_limits": ...}]
    }

Usage:
    from qap.catalog import load_catalog

    catalog = load_catalog()                       # built-in
    catalog = load_catalog("plans/customer_x.json")
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from .catalog_data import (
    CATALOG_VERSION, MQP_ROWS, VISUAL_EL_ROWS,
    CUSTOMER_OPTIONS, PRODUCT_TYPE_OPTIONS, PLANT_OPTIONS,
)
from .catalog_models import (
    CriteriaGroup, MQPSpecification, VisualELSpecification,
    SpecificationCatalog, HeaderOptions, row_from_dict,
)

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when catalog data is malformed."""
    pass


def _validate(catalog: SpecificationCatalog, source: str) -> SpecificationCatalog:
    """Every row needs a non-empty baseline so a 'matches' decision has a value."""
    for row in catalog.mqp:
        if row.criteria_group != CriteriaGroup.MQP:
            raise CatalogError(f"{source}: MQP sequence contains a {row.criteria_group.value} row")
    for row in catalog.visual_el:
        if row.criteria_group == CriteriaGroup.MQP:
            raise CatalogError(f"{source}: Visual/EL sequence contains an MQP row")

    for row in list(catalog.mqp) + list(catalog.visual_el):
        if not (row.baseline_specification or "").strip():
            raise CatalogError(
                f"{source}: row '{row.sub_criteria}' ({row.criteria_group.value}) "
                f"has an empty baseline specification"
            )
    return catalog


def default_catalog() -> SpecificationCatalog:
    """Built-in PV module catalog."""
    catalog = SpecificationCatalog(
        mqp=[MQPSpecification(*row) for row in MQP_ROWS],
        visual_el=[
            VisualELSpecification(CriteriaGroup(row[0]), *row[1:])
            for row in VISUAL_EL_ROWS
        ],
        version=CATALOG_VERSION,
    )
    return _validate(catalog, "built-in catalog")


def load_catalog(path: Optional[Union[str, Path]] = None) -> SpecificationCatalog:
    """
    Load the baseline catalog.

    Args:
        path: Optional JSON catalog file. Built-in tables are used when None.

    Returns:
        SpecificationCatalog

    Raises:
        CatalogError: If the file is unreadable or a row is malformed
    """
    if path is None:
        return default_catalog()

    path = Path(path)
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.error(f"Failed to read catalog file {path}: {e}")
        raise CatalogError(f"Cannot read catalog file {path}: {e}") from e

    if not isinstance(data, dict):
        raise CatalogError(f"{path}: top level must be an object, got {type(data).__name__}")

    try:
        mqp = [row_from_dict(r) for r in data.get("mqp", [])]
        visual_el = [row_from_dict(r) for r in data.get("visual_el", [])]
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise CatalogError(f"{path}: malformed catalog row: {e}") from e

    catalog = SpecificationCatalog(mqp=mqp, visual_el=visual_el, version=data.get("version"))
    catalog = _validate(catalog, str(path))
    logger.info(
        f"Loaded catalog from {path}: {len(catalog.mqp)} MQP rows, "
        f"{len(catalog.visual_el)} Visual/EL rows"
    )
    return catalog


def header_options() -> HeaderOptions:
    return HeaderOptions(
        customers=list(CUSTOMER_OPTIONS),
        product_types=list(PRODUCT_TYPE_OPTIONS),
        plants=list(PLANT_OPTIONS),
    )
