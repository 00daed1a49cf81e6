"""
Built-in Baseline Catalog -- PV Module Production
=================================================

Manufacturer's standard inspection plan for crystalline PV modules.
Deterministic lookup tables, loaded once per session.
"""

from typing import List, Tuple

# Bump when any table below changes.
CATALOG_VERSION = "1.0.0"


# =====================================================================
# MQP -- MEASURABLE QUALITY PARAMETERS
# =====================================================================
# (sub_criteria, component_operation, characteristics, class,
#  type_of_check, sampling, specification)

MQP_ROWS: List[Tuple[str, str, str, str, str, str, str]] = [
    (
        "Incoming", "Solar cell", "Cell efficiency", "Critical",
        "Sun simulator / supplier COC", "1 per lot",
        "Efficiency bin as per BOM, tolerance +/- 0.1%",
    ),
    (
        "Incoming", "Front glass", "Thickness", "Major",
        "Vernier caliper", "5 pcs per lot",
        "3.2mm +/- 0.2mm (single glass), 2.0mm +/- 0.1mm (dual glass)",
    ),
    (
        "Incoming", "EVA / POE encapsulant", "Gel content", "Critical",
        "Xylene extraction", "1 per lot",
        "Gel content 75% - 95%",
    ),
    (
        "In-process", "Stringer", "Ribbon peel strength", "Critical",
        "Peel tester at 180 degrees", "2 strings per shift",
        ">= 1.0 N/mm average, no value below 0.8 N/mm",
    ),
    (
        "In-process", "Lay-up", "Cell-to-cell gap", "Major",
        "Steel scale", "5 modules per shift",
        "2.0mm +/- 0.5mm",
    ),
    (
        "In-process", "Laminator", "Lamination temperature", "Major",
        "Thermocouple log", "Each batch",
        "145 - 150 degrees C, cycle time per recipe",
    ),
    (
        "In-process", "Framing", "Frame corner gap", "Minor",
        "Feeler gauge", "5 modules per shift",
        "<= 0.5mm at all four corners",
    ),
    (
        "Final", "Module", "Maximum power (Pmax)", "Critical",
        "Sun simulator at STC", "100%",
        "Pmax >= nameplate, positive tolerance 0 to +5W",
    ),
    (
        "Final", "Module", "Insulation resistance", "Critical",
        "Hi-pot tester", "100%",
        ">= 40 MOhm.m2 at 1500V DC",
    ),
    (
        "Final", "Module", "Ground continuity", "Major",
        "Ground continuity tester", "100%",
        "<= 0.1 Ohm at 2.5x max over-current rating",
    ),
    (
        "Final", "Junction box", "Cable length", "Minor",
        "Measuring tape", "5 modules per shift",
        "1200mm +/- 10mm (portrait), 300mm +/- 10mm (landscape)",
    ),
]


# =====================================================================
# VISUAL / EL -- DEFECT CRITERIA
# =====================================================================
# (criteria, sub_criteria, defect, defect_class, description,
#  criteria_limits)

VISUAL_EL_ROWS: List[Tuple[str, str, str, str, str, str]] = [
    (
        "Visual", "Glass", "Scratch", "Minor",
        "Surface scratch on front glass",
        "Length <= 20mm, max 2 per module, not felt by fingernail",
    ),
    (
        "Visual", "Glass", "Crack / chip", "Critical",
        "Any crack or chipping on glass",
        "Not allowed",
    ),
    (
        "Visual", "Cell", "Color variation", "Minor",
        "Visible shade difference between cells",
        "Not more than 2 shades within one module",
    ),
    (
        "Visual", "Lamination", "Bubble", "Major",
        "Air bubble or void in laminate",
        "Diameter <= 2mm, max 3 per module, none over cell or busbar",
    ),
    (
        "Visual", "Lamination", "Foreign material", "Major",
        "Foreign particle inside laminate",
        "Length <= 5mm, max 2 per module, not bridging cells",
    ),
    (
        "Visual", "Frame", "Sealant overflow", "Minor",
        "Excess silicone on frame or glass",
        "Must be cleaned, no residue visible at 1m",
    ),
    (
        "EL", "Cell", "Micro crack", "Critical",
        "Crack visible in EL image",
        "Not allowed if isolating more than 5% of cell area",
    ),
    (
        "EL", "Cell", "Dark cell / inactive area", "Critical",
        "Cell or area not luminescing",
        "Not allowed",
    ),
    (
        "EL", "Cell", "Finger interruption", "Minor",
        "Broken grid fingers",
        "Total affected area <= 3% per cell, max 5 cells per module",
    ),
    (
        "EL", "String", "Soldering defect", "Major",
        "Dark ribbon edge indicating poor solder joint",
        "Not allowed",
    ),
]


# =====================================================================
# HEADER OPTIONS
# =====================================================================

CUSTOMER_OPTIONS: List[str] = ["akanksha", "praful", "yamini", "jmr", "cmk"]

PRODUCT_TYPE_OPTIONS: List[str] = [
    "Dual Glass M10 Perc",
    "Dual Glass M10 Topcon",
    "Dual Glass G12R Topcon",
    "Dual Glass G12 Topcon",
    "M10 Transparent Perc",
]

PLANT_OPTIONS: List[str] = ["P2", "P4", "P5"]
