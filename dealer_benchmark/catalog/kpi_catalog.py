"""
KPI catalog — the fixed set of KPIs a dealer CSV is matched against.

Contents
--------
  78 KPI definitions across 7 departments:
      overall 20 | new vehicle 8 | used vehicle 11 | F&I 7 | P&A 8 | A&L 9 | service 15
  7 report groupings (``DPS-01`` … ``DPS-07``), one per department.

Lookup
------
``KpiCatalog`` builds two immutable indexes once, at construction:

  ``get(kpi_code)``                  code → definition
  ``match_description(description)`` normalized CSV description → definition

Index construction fails with ``CatalogIntegrityError`` if two KPIs share a
code or a normalized description, or if a grouping names an unknown code.
Such a collision is an authoring bug in this module, never a runtime
condition.

``DEFAULT_CATALOG`` is the process-wide instance built from the tables below.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence, TypeVar

from dealer_benchmark.errors import CatalogIntegrityError
from dealer_benchmark.ingestion.descriptions import normalize_csv_description
from dealer_benchmark.models.kpi import BenchmarkBounds, KpiDefinition, ReportGrouping
from dealer_benchmark.taxonomy.benchmark_taxonomy import DataFormat, DepartmentCode, RulesetId

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

_CUR = DataFormat.CURRENCY
_PCT = DataFormat.PERCENTAGE
_RAT = DataFormat.RATIO
_CNT = DataFormat.COUNT
_SCR = DataFormat.SCORE

_ZZZ = RulesetId.UNSCORED


# ── Catalog tables ────────────────────────────────────────────────────────────
# (kpi_code, kpi_name, csv_description, ruleset, format, higher_is_better, min, max)

_Row = tuple[str, str, str, RulesetId, DataFormat, bool, Optional[float], Optional[float]]

_OVERALL: tuple[_Row, ...] = (
    ("OVERALL_NET_SALES", "Net Sales", "Overall Dealership Net Sales", _ZZZ, _CUR, True, None, None),
    ("OVERALL_GROSS_MARGIN", "Gross Margin %", "Overall Dealership Gross Margin %", RulesetId.A, _PCT, True, None, None),
    ("ABC_PRODUCT_GROSS_MARGIN", "Total ABC Product Gross Margin %", "Total ABC Product Gross Margin % (Excl. Service Labour)", RulesetId.A, _PCT, True, None, None),
    ("EMPLOYEE_WAGES_PCT", "Employee Wages as % of Sales", "Employee Wages as a % of Overall Dealership Sales", RulesetId.B, _PCT, False, None, None),
    ("GM_ADMIN_WAGES_PCT", "GM & Admin Wages as % of Sales", "General Management & Admin. Wages as a % of Overall Dealership Sales", RulesetId.B, _PCT, False, None, None),
    ("ADVERTISING_PER_UNIT", "Advertising $ Per Unit Sold", "Advertising Dollars Per Unit Sold", _ZZZ, _CUR, False, None, None),
    ("ADVERTISING_PCT_SALES", "Advertising as % of Net Sales", "Advertising as a % of Net Sales", _ZZZ, _PCT, False, None, None),
    ("OPERATING_EXPENSES_PCT", "Operating Expenses as % of Sales", "Total Operating Expenses as % of Net Sales", _ZZZ, _PCT, False, None, None),
    ("NET_OPERATING_PROFIT", "Net Operating Profit ($)", "Net Operating Profit Before Taxes and Non-Operating Income/Expenses ($)", _ZZZ, _CUR, True, None, None),
    ("NET_OPERATING_PROFIT_PCT", "Net Operating Profit % (ROS)", "Net Operating Profit as a % of Net Sales (RETURN ON SALES)", RulesetId.A, _PCT, True, None, None),
    ("NET_INCOME_AFTER_TAX", "Net Income After Taxes ($)", "Net Income (Loss) After Taxes ($)", _ZZZ, _CUR, True, None, None),
    ("NET_INCOME_PCT", "Net Income as % of Sales", "Net Income (Loss) After Taxes as % of Sales", _ZZZ, _PCT, True, None, None),
    ("TOTAL_ABSORPTION", "Total Absorption", "Total Absorption", RulesetId.A, _PCT, True, None, None),
    ("CXI_NPS", "CXI Net Promoter Score", "CXI Net Promoter Score (NPS)", RulesetId.A, _SCR, True, None, None),
    ("NEW_ABC_CONTRIBUTION_DAT", "New ABC Sales % Contribution", "New ABC Sales % Contribution within DAT", RulesetId.C, _PCT, True, None, None),
    ("MARKET_SHARE_601CC", "Market Share % (601cc+)", "Total Brand Market Share % within DAT (601cc+)", RulesetId.C, _PCT, True, None, None),
    ("CURRENT_RATIO", "Current Ratio", "Current Ratio", RulesetId.D, _RAT, True, None, None),
    ("DEBT_EQUITY_RATIO", "Debt/Equity Ratio", "Debt / Equity Ratio", _ZZZ, _RAT, False, None, None),
    ("DEBT_TNW_RATIO", "Debt to TNW Ratio", "Debt to TNW Ratio", _ZZZ, _RAT, False, None, None),
    ("ROA", "Return on Operating Assets (ROA)", "Return on Operating Assets - YTD (ROA)", RulesetId.E, _PCT, True, None, None),
)

_NEW_VEHICLE: tuple[_Row, ...] = (
    ("NEW_ABC_UNITS_SOLD", "# of New ABC Motorcycles Sold", "# of New ABC Motorcycles Sold", _ZZZ, _CNT, True, None, None),
    ("NEW_ABC_NET_SALES", "New ABC Motorcycle Net Sales $", "New ABC Motorcycle Net Sales $", _ZZZ, _CUR, True, None, None),
    ("NEW_ABC_GROSS_MARGIN", "New ABC MC Gross Margin %", "New ABC MC Gross Margin %", RulesetId.F, _PCT, True, 0.13, 0.15),
    ("NEW_ABC_AVG_SELLING_PRICE", "New ABC MC Average Selling Price", "New ABC MC Average Selling Price", _ZZZ, _CUR, True, None, None),
    ("ABC1_PERFORMANCE_REWARDS", "ABC 1 Performance Rewards Earned", "ABC 1 Performance Rewards Earned", _ZZZ, _CUR, True, None, None),
    ("NEW_OTHER_UNITS_SOLD", "# of New Other MC/Vehicles Sold", "# of New Other (NON ABC) MC/Vehicles/Units Sold", _ZZZ, _CNT, True, None, None),
    ("NEW_OTHER_NET_SALES", "New Other MC/Vehicles Net Sales $", "New Other (NON ABC) MC/Vehicles/Units Net Sales $", _ZZZ, _CUR, True, None, None),
    ("NEW_OTHER_GROSS_MARGIN", "New Other MC/Vehicles Gross Margin %", "New Other (NON ABC) MC/Vehicles/Units Gross Margin %", _ZZZ, _PCT, True, None, None),
)

_USED_VEHICLE: tuple[_Row, ...] = (
    ("USED_ABC_UNITS_SOLD", "# of Used ABC MC Sold", "# of Used ABC MC Sold", _ZZZ, _CNT, True, None, None),
    ("USED_ABC_NET_SALES", "Used ABC MC Net Sales $", "Used ABC MC Net Sales $", _ZZZ, _CUR, True, None, None),
    ("USED_ABC_GROSS_MARGIN", "Used ABC Gross Margin %", "Used ABC Gross Margin %", RulesetId.F, _PCT, True, 0.11, 0.135),
    ("USED_ABC_AVG_SELLING_PRICE", "Used ABC MC Average Selling Price", "Used ABC MC Average Selling Price", _ZZZ, _CUR, True, None, None),
    ("NEW_USED_RATIO_ABC", "New:Used Ratio (ABC)", "New:Used Ratio (ABC)", _ZZZ, _RAT, True, None, None),
    ("USED_NONABC_UNITS_SOLD", "# of Used NON-ABC MC Sold", "# of Used NON-ABC MC Sold", _ZZZ, _CNT, True, None, None),
    ("USED_NONABC_NET_SALES", "Used NON-ABC MC Net Sales $", "Used NON-ABC MC Net Sales $", _ZZZ, _CUR, True, None, None),
    ("USED_NONABC_GROSS_MARGIN", "Used NON-ABC MC Gross Margin %", "Used NON-ABC MC Gross Margin %", _ZZZ, _PCT, True, None, None),
    ("TOTAL_USED_UNITS_SOLD", "Total # of Used MC Sold", "Total # of Used MC (ABC & NON-ABC) Sold", _ZZZ, _CNT, True, None, None),
    ("TOTAL_USED_NET_SALES", "Total Used MC Net Sales $", "Total Used MC (ABC & NON-ABC) Net Sales $", _ZZZ, _CUR, True, None, None),
    ("TOTAL_USED_GROSS_MARGIN", "Total Used MC Gross Margin %", "Total Used MC (ABC & NON-ABC) Gross Margin %", RulesetId.F, _PCT, True, 0.11, 0.135),
)

_FI: tuple[_Row, ...] = (
    ("FI_TOTAL_SALES", "Total F&I Sales $", "Total Finance & Insurance Sales $", _ZZZ, _CUR, True, None, None),
    ("FI_GROSS_PROFIT_PTUR", "F&I Gross Profit PTUR", "F&I Gross Profit Per Total Units Retailed (PTUR)", _ZZZ, _CUR, True, None, None),
    ("ABCFS_FI_INCOME_PNUHMR", "ABCFS F&I Income PNUHMR", "ABCFS F&I Income Per New & Used ABC MC Retailed (PNUHMR)", _ZZZ, _CUR, True, None, None),
    ("ABCFS_FI_GROSS_PROFIT_PNUHMR", "ABCFS F&I Gross Profit PNUHMR", "ABCFS F&I Gross Profit Per New & Used ABC MC Retailed (PNUHMR)", _ZZZ, _CUR, True, None, None),
    ("ABCFS_ESP_PENETRATION", "ABCFS ESP Penetration %", "ABCFS ESP Penetration %", RulesetId.F, _PCT, True, 0.45, 0.60),
    ("ABCFS_RETAIL_FINANCE_PENETRATION", "ABCFS Retail Finance Penetration %", "ABCFS Retail Finance Product Penetration %", RulesetId.F, _PCT, True, 0.45, 0.60),
    ("LIFE_DISABILITY_PENETRATION", "Life & Disability Insurance Penetration %", "Life & Disability Insurance Penetration %", RulesetId.F, _PCT, True, 0.20, 0.25),
)

_PA: tuple[_Row, ...] = (
    ("PA_TOTAL_SALES", "Total P&A Sales", "Total P&A Sales", _ZZZ, _CUR, True, None, None),
    ("PA_GROSS_MARGIN", "P&A Gross Margin %", "P&A Gross Margin %", RulesetId.F, _PCT, True, 0.30, 0.40),
    ("ABC_PA_TOTAL_SALES", "ABC P&A Total Sales", "Total Sales - ABC Parts & Accessories", _ZZZ, _CUR, True, None, None),
    ("ABC_PA_GROSS_MARGIN", "ABC P&A Gross Margin %", "ABC Parts & Accessories Gross Margin %", RulesetId.F, _PCT, True, 0.31, 0.42),
    ("PA_NET_SALES_PTUR", "P&A Net Sales PTUR", "P&A Net Sales Per Total Units Retailed (PTUR)", _ZZZ, _CUR, True, None, None),
    ("ABC_PA_NET_SALES_PNHMR", "ABC P&A Net Sales PNHMR", "ABC P&A Net Sales per New ABC MC Retailed (PNHMR)", _ZZZ, _CUR, True, None, None),
    ("ABC_PA_INVENTORY_TURNS", "ABC P&A Inventory Turns", "ABC P&A Inventory Turns", RulesetId.F, _RAT, True, 3.0, 3.5),
    ("ABC_PA_NONMOVING_INVENTORY", "ABC P&A Non-Moving Inventory %", "ABC P&A Non-Moving Inventory %", RulesetId.G, _PCT, False, 0.15, 0.20),
)

_AL: tuple[_Row, ...] = (
    ("AL_TOTAL_SALES", "Total A&L Sales", "Total A&L Sales", _ZZZ, _CUR, True, None, None),
    ("AL_GROSS_MARGIN", "A&L Gross Margin %", "Apparel & Licensing Gross Margin %", RulesetId.F, _PCT, True, 0.31, 0.42),
    ("ABC_AL_TOTAL_SALES", "ABC A&L Total Sales", "Total Sales - ABC Apparel & Licensing", _ZZZ, _CUR, True, None, None),
    ("ABC_AL_GROSS_MARGIN", "ABC A&L Gross Margin %", "ABC Apparel & Licensing Gross Margin %", RulesetId.F, _PCT, True, 0.33, 0.44),
    ("AL_NET_SALES_PTUR", "A&L Net Sales PTUR", "Apparl. & Licens. Net Sales per Total Units Retailed (PTUR)", _ZZZ, _CUR, True, None, None),
    ("ABC_AL_NET_SALES_PNHMR", "ABC A&L Net Sales PNHMR", "ABC A&L Net Sales per New ABC MC Retailed (PNHMR)", _ZZZ, _CUR, True, None, None),
    ("ABC_AL_SEASONAL_SELLTHROUGH", "ABC A&L Seasonal Sell-through %", "ABC A&L Seasonal Product Sell-through %", RulesetId.F, _PCT, True, 0.65, 0.75),
    ("ABC_AL_INVENTORY_TURNS", "ABC A&L Inventory Turns", "ABC A&L Inventory Turns", RulesetId.F, _RAT, True, 2.5, 3.0),
    ("ABC_AL_NONMOVING_INVENTORY", "ABC A&L Non-Moving Inventory %", "ABC A&L Non-Moving Inventory %", RulesetId.G, _PCT, False, 0.15, 0.20),
)

_SERVICE: tuple[_Row, ...] = (
    ("SERVICE_NET_SALES", "Total Service Net Sales $", "Total Service Net Sales $", _ZZZ, _CUR, True, None, None),
    ("SERVICE_GROSS_MARGIN", "Service Sales Gross Margin %", "Service Sales Gross Margin %", RulesetId.F, _PCT, True, 0.60, 0.64),
    ("SERVICE_LABOR_NET_SALES", "Service Labour Net Sales $", "Total Service Labour Net Sales $", _ZZZ, _CUR, True, None, None),
    ("SERVICE_LABOR_GROSS_MARGIN", "Service Labour Gross Margin %", "Service Labour Gross Margin %", RulesetId.F, _PCT, True, 0.65, 0.75),
    ("LABOR_REVENUE_PTUR", "Labor Revenue PTUR", "Labor Revenue Per Total Units Retailed (PTUR)", _ZZZ, _CUR, True, None, None),
    ("SERVICE_SALES_PTUR", "Service Sales $ PTUR", "Service Sales $ Per Total Units Retailed", _ZZZ, _CUR, True, None, None),
    ("SERVICE_PA_TO_LABOR_RATIO", "Service P&A to Labour Hour Ratio", "Service Parts & Accessories Dollars to Labour Hour Ratio", _ZZZ, _CUR, True, None, None),
    ("PROFICIENCY", "Proficiency (Profitability)", "Proficiency (Profitability)", RulesetId.F, _PCT, True, 0.70, 0.78),
    ("EFFICIENCY", "Efficiency", "Efficiency", RulesetId.F, _PCT, True, 0.92, 0.97),
    ("RO_PER_TECH_PER_DAY", "RO per Tech per Day", "Repair Orders (RO) per Tech per day", _ZZZ, _CNT, True, None, None),
    ("SERVICE_LABOR_GP_CP", "Service Labour GP CP %", "Service Labour Gross profit CP %", RulesetId.F, _PCT, True, 0.65, 0.72),
    ("SERVICE_LABOR_GP_INTERNAL", "Service Labour GP Internal %", "Service Labour Gross profit Internal PDI/Deal %", _ZZZ, _PCT, True, None, None),
    ("SERVICE_LABOR_GP_WARRANTY", "Service Labour GP Warranty %", "Service Labour Gross profit Warranty %", _ZZZ, _PCT, True, None, None),
    ("EFFECTIVE_SELLING_RATE", "Effective Selling Rate", "Effective Selling Rate", RulesetId.F, _CUR, True, 110, 145),
    ("LABOR_SALES_PER_RO", "Labour Sales per RO", "Labour Sales per RO", RulesetId.F, _CUR, True, 300, 330),
)

_DEPARTMENT_TABLES: dict[DepartmentCode, tuple[_Row, ...]] = {
    DepartmentCode.OVERALL:      _OVERALL,
    DepartmentCode.NEW_VEHICLE:  _NEW_VEHICLE,
    DepartmentCode.USED_VEHICLE: _USED_VEHICLE,
    DepartmentCode.FI:           _FI,
    DepartmentCode.PA:           _PA,
    DepartmentCode.AL:           _AL,
    DepartmentCode.SERVICE:      _SERVICE,
}

# (report_code, report_id, title, department)
_GROUPINGS: tuple[tuple[str, str, str, DepartmentCode], ...] = (
    ("DPS-01", "DPS-07001-01", "Overall Dealership Financial Performance Analysis", DepartmentCode.OVERALL),
    ("DPS-02", "DPS-07001-02", "New Vehicle Sales Department Performance Analysis", DepartmentCode.NEW_VEHICLE),
    ("DPS-03", "DPS-07001-03", "Used Vehicle Sales Department Performance Analysis", DepartmentCode.USED_VEHICLE),
    ("DPS-04", "DPS-07001-04", "F&I Sales Department Performance Analysis", DepartmentCode.FI),
    ("DPS-05", "DPS-07001-05", "Parts & Accessories Sales Department Performance Analysis", DepartmentCode.PA),
    ("DPS-06", "DPS-07001-06", "A&L Sales Growth Department Performance Analysis", DepartmentCode.AL),
    ("DPS-07", "DPS-07001-07", "Service Sales Growth Department Performance Analysis", DepartmentCode.SERVICE),
)


def build_default_definitions() -> list[KpiDefinition]:
    """Materialize the catalog tables as ``KpiDefinition`` objects."""
    definitions: list[KpiDefinition] = []
    for department, table in _DEPARTMENT_TABLES.items():
        for order, (code, name, desc, ruleset, fmt, higher, lo, hi) in enumerate(table, start=1):
            definitions.append(
                KpiDefinition(
                    kpi_code=code,
                    kpi_name=name,
                    csv_description=desc,
                    department=department,
                    data_format=fmt,
                    higher_is_better=higher,
                    ruleset=ruleset,
                    bounds=BenchmarkBounds.from_optional(lo, hi),
                    display_order=order,
                )
            )
    return definitions


def build_default_groupings() -> list[ReportGrouping]:
    """One report grouping per department, listing its KPI codes in order."""
    return [
        ReportGrouping(
            report_code=report_code,
            report_id=report_id,
            title=title,
            department=department,
            kpi_codes=tuple(row[0] for row in _DEPARTMENT_TABLES[department]),
        )
        for report_code, report_id, title, department in _GROUPINGS
    ]


# ── Catalog index ─────────────────────────────────────────────────────────────


class KpiCatalog:
    """Immutable, indexed view over a set of KPI definitions and groupings.

    Args:
        definitions: KPI definitions; codes and normalized descriptions must
            be unique.
        groupings:   Report groupings; every listed code must exist.

    Raises:
        CatalogIntegrityError: On duplicate codes, duplicate normalized
            descriptions, or dangling grouping codes.
    """

    def __init__(
        self,
        definitions: Iterable[KpiDefinition],
        groupings: Iterable[ReportGrouping] = (),
    ) -> None:
        defs = tuple(definitions)
        self._definitions = defs
        self._by_code: Mapping[str, KpiDefinition] = MappingProxyType(
            _unique_index(defs, lambda d: d.kpi_code, "kpi_code")
        )
        self._by_description: Mapping[str, KpiDefinition] = MappingProxyType(
            _unique_index(
                defs,
                lambda d: normalize_csv_description(d.csv_description),
                "normalized csv_description",
            )
        )

        self._groupings = tuple(groupings)
        for grouping in self._groupings:
            unknown = [c for c in grouping.kpi_codes if c not in self._by_code]
            if unknown:
                raise CatalogIntegrityError(
                    f"Grouping {grouping.report_code} references unknown KPI codes: {unknown}"
                )
        self._grouping_by_department: Mapping[DepartmentCode, ReportGrouping] = MappingProxyType(
            _unique_index(self._groupings, lambda g: g.department, "grouping department")
        )

        by_dept: dict[DepartmentCode, list[KpiDefinition]] = defaultdict(list)
        for d in defs:
            by_dept[d.department].append(d)
        self._by_department: Mapping[DepartmentCode, tuple[KpiDefinition, ...]] = MappingProxyType({
            dept: tuple(sorted(items, key=lambda d: d.display_order))
            for dept, items in by_dept.items()
        })

        logger.debug(
            "KpiCatalog built: %d KPIs, %d groupings", len(defs), len(self._groupings)
        )

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self):
        return iter(self._definitions)

    def __contains__(self, kpi_code: object) -> bool:
        return kpi_code in self._by_code

    @property
    def definitions(self) -> tuple[KpiDefinition, ...]:
        return self._definitions

    @property
    def groupings(self) -> tuple[ReportGrouping, ...]:
        return self._groupings

    def get(self, kpi_code: str) -> Optional[KpiDefinition]:
        """Return the definition for ``kpi_code``, or ``None``."""
        return self._by_code.get(kpi_code)

    def match_description(self, description: str) -> Optional[KpiDefinition]:
        """Return the definition whose normalized description equals ``description``'s."""
        return self._by_description.get(normalize_csv_description(description))

    def kpis_for_department(self, department: DepartmentCode) -> tuple[KpiDefinition, ...]:
        """Definitions owned by ``department``, in display order."""
        return self._by_department.get(DepartmentCode(department), ())

    def grouping_for(self, department: DepartmentCode) -> Optional[ReportGrouping]:
        return self._grouping_by_department.get(DepartmentCode(department))

    def grouping_by_report_code(self, report_code: str) -> Optional[ReportGrouping]:
        return next((g for g in self._groupings if g.report_code == report_code), None)

    def partition_by_department(
        self, values: Iterable[_T]
    ) -> dict[DepartmentCode, list[_T]]:
        """Split KPI values into per-department lists using the report groupings.

        ``values`` may be any records carrying a ``kpi_code`` attribute.  Each
        department's list follows its grouping's KPI order; codes no grouping
        lists are dropped.
        """
        by_code = {v.kpi_code: v for v in values}
        return {
            grouping.department: [by_code[c] for c in grouping.kpi_codes if c in by_code]
            for grouping in self._groupings
        }


def _unique_index(items: Sequence[_T], key_fn, label: str) -> dict:
    index: dict = {}
    for item in items:
        key = key_fn(item)
        if key in index:
            raise CatalogIntegrityError(f"Duplicate {label} in KPI catalog: {key!r}")
        index[key] = item
    return index


DEFAULT_CATALOG = KpiCatalog(build_default_definitions(), build_default_groupings())
