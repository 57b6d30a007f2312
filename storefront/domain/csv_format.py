# storefront/domain/csv_format.py
"""
Bulk product CSV.

The format is deliberately naive: one record per line, cells separated
by bare commas, no quoting. Two headers are accepted, the basic
``name,slug,price`` and the extended
``name,slug,price,description,inventory``.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, List

from pydantic import BaseModel, Field, ValidationError

from storefront.domain.schemas import CsvRowError, Product, ProductIn
from storefront.exceptions import CsvFormatError

BASIC_HEADER = ["name", "slug", "price"]
EXTENDED_HEADER = ["name", "slug", "price", "description", "inventory"]


class CsvImport(BaseModel):
    header: List[str]
    records: List[ProductIn] = Field(default_factory=list)
    errors: List[CsvRowError] = Field(default_factory=list)

    @property
    def malformed_count(self) -> int:
        return len(self.errors)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _split(line: str) -> List[str]:
    return [cell.strip() for cell in line.split(",")]


def _parse_price(raw: str) -> Decimal | None:
    try:
        price = Decimal(raw)
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0:
        return None
    return price


def parse_products_csv(filename: str, text: str) -> CsvImport:
    if not filename.lower().endswith(".csv"):
        raise CsvFormatError("Please upload a .csv file", details={"filename": filename})

    rows = [row for row in re.split(r"\r?\n", text) if row]
    header = _split(rows.pop(0)) if rows else []

    if header not in (BASIC_HEADER, EXTENDED_HEADER):
        raise CsvFormatError(
            f"CSV header must be {','.join(BASIC_HEADER)} or {','.join(EXTENDED_HEADER)}",
            details={"header": header},
        )

    extended = header == EXTENDED_HEADER
    result = CsvImport(header=header)

    for idx, line in enumerate(rows):
        cells = _split(line)
        cells += [""] * (len(header) - len(cells))
        values = dict(zip(header, cells))

        row_errors = []
        if not values["name"]:
            row_errors.append("name required")
        if not values["slug"]:
            row_errors.append("slug required")

        price = _parse_price(values["price"]) if values["price"] else None
        if price is None:
            row_errors.append("price invalid")

        inventory = 0
        if extended:
            if not values["inventory"].isdigit():
                row_errors.append("inventory invalid")
            else:
                inventory = int(values["inventory"])

        if row_errors:
            # header is line 1
            result.errors.append(CsvRowError(line=idx + 2, errors=row_errors))
            continue

        try:
            record = ProductIn(
                name=values["name"],
                slug=values["slug"],
                price=price,
                description=values.get("description") or None,
                inventory=inventory,
            )
        except ValidationError as e:
            result.errors.append(
                CsvRowError(line=idx + 2, errors=[err["msg"] for err in e.errors()])
            )
            continue

        result.records.append(record)

    return result


def export_products_csv(products: Iterable[Product]) -> str:
    lines = [",".join(EXTENDED_HEADER)]
    for p in products:
        lines.append(
            ",".join(
                [p.name, p.slug, str(p.price), p.description or "", str(p.inventory)]
            )
        )
    return "\n".join(lines) + "\n"
