"""
QAP Specification Catalog
=========================

Read-only baseline specification rows (MQP and Visual/EL) and the
header option lists offered when starting a QAP.
"""

from .catalog_models import (
    CriteriaGroup,
    MQPSpecification,
    VisualELSpecification,
    CatalogRow,
    SpecificationCatalog,
    HeaderOptions,
)
from .catalog_loader import CatalogError, default_catalog, load_catalog, header_options
